"""
Run the metabolite screening analysis on a metabolite table.

Configure all parameters below (paths come from .env: METABOLITE_DATA_PATH,
METABOLITE_RESULTS_DIR) and run to screen, plot and evaluate classifiers.
"""

import os

from metabolite_screen_lib.analyze import analyze_metabolites
from metabolite_screen_lib.config import ScreeningConfig
from metabolite_screen_lib.env_loader import DATA_PATH, RESULTS_DIR
from metabolite_screen_lib.loading import load_metabolite_table

# =============================================================================
# CONFIGURATION - Edit these parameters
# =============================================================================

# Classes (mean difference = CLASS_A - CLASS_B)
CLASS_A = 'cachexic'
CLASS_B = 'control'

# Data loading
LABEL_COLUMN = 'Muscle loss'
ID_COLUMN = None              # None = first column
LOG_TRANSFORM = False         # log2(x + 1) concentrations

# Statistical parameters
ALPHA = 0.05                  # Threshold on Bonferroni-corrected p-values
EQUAL_VAR = False             # False = Welch, True = Student
ON_ERROR = 'skip'             # 'raise' aborts on first non-computable feature
CAP_CORRECTED = False         # Cap corrected p-values at 1.0
N_JOBS = 1                    # Threads for the per-feature loop

# Classification
MODEL_TYPES = ('Logit', 'Logit_l1', 'LGBM_classifier', 'XGB_classifier')
CV_FOLDS = 5
RANDOM_STATE = 42
USE_SIGNIFICANT_ONLY = True

SAVE_FIGURES = True

# =============================================================================
# MAIN - No need to edit below
# =============================================================================

def main():
    config = ScreeningConfig(
        class_a=CLASS_A,
        class_b=CLASS_B,
        label_column=LABEL_COLUMN,
        id_column=ID_COLUMN,
        log_transform=LOG_TRANSFORM,
        alpha=ALPHA,
        equal_var=EQUAL_VAR,
        on_error=ON_ERROR,
        cap_corrected=CAP_CORRECTED,
        n_jobs=N_JOBS,
        model_types=MODEL_TYPES,
        cv_folds=CV_FOLDS,
        random_state=RANDOM_STATE,
        use_significant_only=USE_SIGNIFICANT_ONLY,
        save_figures=SAVE_FIGURES,
    )

    print(f"Loading metabolites from: {DATA_PATH}")
    matrix, labels = load_metabolite_table(
        DATA_PATH,
        label_column=config.label_column,
        id_column=config.id_column,
        log_transform=config.log_transform
    )

    os.makedirs(RESULTS_DIR, exist_ok=True)
    print(f"\nRunning analysis, saving to: {RESULTS_DIR}")
    results = analyze_metabolites(matrix, labels, config=config, save_dir=RESULTS_DIR)

    print("\nDone!")
    return results


if __name__ == '__main__':
    results = main()
