"""
Metabolite Screening Analysis - Main Entry Point.

Screens metabolites for differential abundance between two classes, plots the
distributions and checks whether the classes are predictable from the
concentrations.
"""

import os
from typing import Dict, Sequence

import pandas as pd

from .config import ScreeningConfig
from .screening import DifferentialAbundanceScreener, results_to_frame, significant_features
from .classification import evaluate_classifiers
from .visualization import ScreeningVisualization
from .utils import print_screening_summary, print_classification_summary, save_results


def analyze_metabolites(
    matrix: pd.DataFrame,
    labels: Sequence,
    config: ScreeningConfig = None,
    save_dir: str = None,
    run_classifiers: bool = True
) -> Dict:
    """
    Main entry point for metabolite screening.

    Runs:
    1. Differential abundance screening (t-test + Bonferroni) on every feature
    2. Distribution, box and volcano plots
    3. Cross-validated classifiers on the significant (or all) features

    Args:
        matrix: Feature matrix, one numeric column per metabolite
        labels: Class label per row, aligned by position
        config: Analysis configuration (uses defaults if None)
        save_dir: Directory to save results and figures (None = don't save)
        run_classifiers: Skip step 3 when False

    Returns:
        Dictionary with:
            - 'screening_results': List of FeatureResult (input column order)
            - 'screening_df': Same results as a DataFrame
            - 'significant_features': Names of significant features
            - 'classification': Dict model name -> ClassificationResult
            - 'config': The config used

    Example:
        >>> from metabolite_screen_lib import analyze_metabolites, load_metabolite_table, ScreeningConfig
        >>> config = ScreeningConfig(class_a='cachexic', class_b='control', on_error='skip')
        >>> matrix, labels = load_metabolite_table('human_cachexia.csv', label_column=config.label_column)
        >>> results = analyze_metabolites(matrix, labels, config=config, save_dir='/path/to/output')
    """
    if config is None:
        config = ScreeningConfig()

    print("=" * 60)
    print("Metabolite Differential Abundance Analysis")
    print("=" * 60)

    if save_dir:
        os.makedirs(save_dir, exist_ok=True)

    # Step 1: Screening
    print(f"\n[Step 1] Screening {matrix.shape[1]} features: {config.class_a} vs {config.class_b}...")
    test_name = "Student" if config.equal_var else "Welch"
    print(f"  {test_name} t-test, alpha={config.alpha}, on_error='{config.on_error}'")
    screener = DifferentialAbundanceScreener.from_config(config)
    screening_results = screener.screen(matrix, labels)
    screening_df = results_to_frame(screening_results)
    selected = significant_features(screening_results)
    print_screening_summary(screening_results, config.class_a, config.class_b)

    results = {
        'screening_results': screening_results,
        'screening_df': screening_df,
        'significant_features': selected,
        'config': config
    }

    # Step 2: Visualizations
    if save_dir and config.save_figures:
        print("\n[Step 2] Creating visualizations...")
        create_screening_plots(matrix, labels, screening_df, selected, config, save_dir)

    # Step 3: Classifiers
    if run_classifiers:
        print("\n[Step 3] Cross-validating classifiers...")
        features = selected if (config.use_significant_only and selected) else list(matrix.columns)
        if config.use_significant_only and not selected:
            print("  WARNING: No significant features, using all features")
        classification = evaluate_classifiers(
            matrix[features],
            labels,
            model_types=config.model_types,
            class_a=config.class_a,
            class_b=config.class_b,
            cv_folds=config.cv_folds,
            random_state=config.random_state
        )
        print_classification_summary(classification)
        results['classification'] = classification

        if save_dir and config.save_figures:
            viz = ScreeningVisualization(config.class_a, config.class_b,
                                         config.class_a_color, config.class_b_color)
            viz.plot_classifier_scores(classification,
                                       save_path=os.path.join(save_dir, 'figures', 'classifier_accuracy'))

    if save_dir:
        save_results(results, save_dir)

    print("\n" + "=" * 60)
    print("Analysis complete!")
    if save_dir:
        print(f"Results saved to: {save_dir}")
    print("=" * 60)

    return results


def create_screening_plots(
    matrix: pd.DataFrame,
    labels: Sequence,
    screening_df: pd.DataFrame,
    selected: Sequence[str],
    config: ScreeningConfig,
    save_dir: str
) -> None:
    """Distribution grid, significant box plots and volcano plot."""
    viz = ScreeningVisualization(config.class_a, config.class_b,
                                 config.class_a_color, config.class_b_color)
    figs_dir = os.path.join(save_dir, 'figures')
    os.makedirs(figs_dir, exist_ok=True)

    # Strongest features first so the grid stays readable on wide tables
    ranked = screening_df.sort_values('raw_p_value')['feature_name'].tolist()
    viz.plot_distributions(matrix, labels, features=ranked[:16],
                           figsize=config.distribution_figsize,
                           save_path=os.path.join(figs_dir, 'distributions_top'))

    viz.plot_boxplots(matrix, labels, list(selected)[:config.max_boxplots], standardize=True,
                      save_path=os.path.join(figs_dir, 'significant_boxplots'))

    viz.plot_volcano(screening_df, alpha=config.alpha,
                     figsize=config.volcano_figsize,
                     title=config.volcano_title,
                     save_path=os.path.join(figs_dir, 'volcano'))
