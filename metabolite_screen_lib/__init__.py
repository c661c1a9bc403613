"""
Metabolite Screening Library

Differential abundance screening of metabolite concentrations between two
classes, with plots and classifier evaluation.

Quick Start:
    from metabolite_screen_lib import load_metabolite_table, screen, significant_features

    # Subject id column is discarded, 'Muscle loss' holds cachexic/control
    matrix, labels = load_metabolite_table('human_cachexia.csv', label_column='Muscle loss')

    results = screen(matrix, labels, class_a='cachexic', class_b='control')
    selected = significant_features(results)

Main Entry Points:
- screen: Per-feature t-test with Bonferroni correction
- analyze_metabolites: Full pipeline (screening, plots, classifiers)
- ScreeningConfig: Configuration dataclass for all analysis parameters
- load_metabolite_table: Read and split a metabolite table

Core Components:
- DifferentialAbundanceScreener: Reusable screener object
- ScreeningVisualization: Distribution, box and volcano plots
- cross_validate_classifier: Cross-validated accuracy of a classifier
"""

# Main entry points (most users only need these)
from .screening import (
    screen,
    bonferroni_correct,
    results_to_frame,
    significant_features,
    DifferentialAbundanceScreener,
    FeatureResult,
)
from .config import ScreeningConfig
from .loading import load_metabolite_table, split_features_and_labels
from .analyze import analyze_metabolites
from .exceptions import (
    ScreeningError,
    ShapeMismatchError,
    LabelMismatchError,
    FeatureNotComputableError,
    InsufficientDataError,
    NonFiniteStatisticError,
    ZeroVarianceError,
)

# Outer layers
from .classification import (
    ClassifierFactory,
    ClassificationResult,
    cross_validate_classifier,
    evaluate_classifiers,
)
from .visualization import ScreeningVisualization

__all__ = [
    # Main entry points
    'screen',
    'analyze_metabolites',
    'ScreeningConfig',
    'load_metabolite_table',
    'split_features_and_labels',

    # Screening
    'bonferroni_correct',
    'results_to_frame',
    'significant_features',
    'DifferentialAbundanceScreener',
    'FeatureResult',

    # Errors
    'ScreeningError',
    'ShapeMismatchError',
    'LabelMismatchError',
    'FeatureNotComputableError',
    'InsufficientDataError',
    'ZeroVarianceError',
    'NonFiniteStatisticError',

    # Outer layers
    'ClassifierFactory',
    'ClassificationResult',
    'cross_validate_classifier',
    'evaluate_classifiers',
    'ScreeningVisualization',
]
