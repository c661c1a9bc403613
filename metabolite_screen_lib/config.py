"""
Configuration for Metabolite Screening Analysis.

Provides a dataclass with all configurable parameters for the analysis pipeline.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

ON_ERROR_OPTIONS = ('raise', 'skip')


@dataclass
class ScreeningConfig:
    """
    Configuration for metabolite differential abundance analysis.

    Attributes:
        # Classes
        class_a: Label of the first group (mean_difference = mean(a) - mean(b))
        class_b: Label of the second group

        # Data loading
        label_column: Column holding the two-level class label
        id_column: Subject identifier column to discard (None = first column)
        log_transform: Apply log2(x + 1) to concentrations after loading

        # Statistical parameters
        alpha: Significance level applied to Bonferroni-corrected p-values
        equal_var: False = Welch t-test, True = Student t-test
        on_error: Per-feature failures - 'raise' (abort on first) or 'skip'
                  (report the feature as not computable and continue)
        cap_corrected: Cap corrected p-values at 1.0 (default keeps raw * n)
        n_jobs: Worker threads for the per-feature loop (1 = sequential)

        # Classification
        model_types: Classifier presets evaluated with cross-validation
        cv_folds: Number of stratified folds
        random_state: Seed for fold shuffling and model randomness
        use_significant_only: Train on significant features only (falls back
                              to all features when none are significant)

        # Visualization parameters
        save_figures: Save generated figures to disk
        max_boxplots: Maximum number of significant features drawn as box plots
        volcano_figsize: Figure size for the volcano plot (width, height)
        distribution_figsize: Figure size for distribution grids
        class_a_color: Color for class_a
        class_b_color: Color for class_b
        volcano_title: Title for the volcano plot ({label_a}, {label_b}, {n} placeholders)
    """
    # Classes
    class_a: str = 'cachexic'
    class_b: str = 'control'

    # Data loading
    label_column: str = 'Muscle loss'
    id_column: Optional[str] = None
    log_transform: bool = False

    # Statistical parameters
    alpha: float = 0.05
    equal_var: bool = False
    on_error: str = 'raise'  # 'raise' | 'skip'
    cap_corrected: bool = False
    n_jobs: int = 1

    # Classification
    model_types: Tuple[str, ...] = ('Logit', 'LGBM_classifier')
    cv_folds: int = 5
    random_state: int = 42
    use_significant_only: bool = True

    # Visualization parameters
    save_figures: bool = True
    max_boxplots: int = 12
    volcano_figsize: Tuple[int, int] = (12, 9)
    distribution_figsize: Tuple[int, int] = (16, 12)
    class_a_color: str = '#FF5252'
    class_b_color: str = '#2196F3'
    volcano_title: str = 'Differential abundance: {label_a} vs {label_b} (n features={n})'

    def __post_init__(self):
        """Validate configuration values."""
        if self.class_a == self.class_b:
            raise ValueError(f"class_a and class_b must differ, both are '{self.class_a}'")
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha ({self.alpha}) must be between 0 and 1")
        if self.on_error not in ON_ERROR_OPTIONS:
            raise ValueError(f"on_error must be 'raise' or 'skip', got '{self.on_error}'")
        if self.n_jobs == 0:
            raise ValueError("n_jobs must be a positive integer or -1")
        if self.cv_folds < 2:
            raise ValueError(f"cv_folds ({self.cv_folds}) must be at least 2")
        if self.max_boxplots < 1:
            raise ValueError(f"max_boxplots ({self.max_boxplots}) must be positive")
