"""
Metabolite Screening - Utility Functions.

Helper functions for standardization, summaries and saving results.
"""

import os
import json
from typing import Dict, List

import pandas as pd
from sklearn.preprocessing import StandardScaler

from .screening import FeatureResult


# =============================================================================
# Standardization
# =============================================================================

def standardize_features(
    df: pd.DataFrame,
    columns: list = None,
    reference_df: pd.DataFrame = None
) -> pd.DataFrame:
    """
    Standardize numeric columns to z-scores (mean=0, std=1).

    Args:
        df: DataFrame to standardize
        columns: Specific columns to standardize. If None, uses all numeric columns.
        reference_df: DataFrame to compute mean/std from. If None, uses df itself.

    Returns:
        DataFrame with standardized values (NaN stays NaN)
    """
    df_scaled = df.copy()

    if columns is None:
        columns = df.select_dtypes(include=['number']).columns.tolist()

    if not columns:
        return df_scaled

    ref = reference_df if reference_df is not None else df

    scaler = StandardScaler()
    scaler.fit(ref[columns])
    df_scaled[columns] = scaler.transform(df[columns])

    return df_scaled


# =============================================================================
# Summaries
# =============================================================================

def print_screening_summary(results: List[FeatureResult], class_a: str, class_b: str, top_n: int = 5) -> None:
    """Print counts and the strongest significant features."""
    n_total = len(results)
    not_computable = [r for r in results if not r.is_computable]
    significant = sorted((r for r in results if r.is_significant), key=lambda r: r.raw_p_value)

    print(f"  Tested {n_total} features (Bonferroni multiplier = {n_total})")
    print(f"  {len(significant)} significant, {len(not_computable)} not computable")

    for r in not_computable:
        print(f"    WARNING: {r.reason}")

    if significant:
        print("  Top significant:")
        for r in significant[:top_n]:
            direction = "higher" if r.mean_difference > 0 else "lower"
            print(f"    {r.feature_name}: {direction} in {class_a}, {class_a} - {class_b} = {r.mean_difference:.3g}, "
                  f"p_bonf={r.corrected_p_value:.3g}")


def print_classification_summary(classification_results: Dict) -> None:
    for name, res in classification_results.items():
        print(f"  {name}: accuracy {res.mean_accuracy:.3f} +/- {res.std_accuracy:.3f}, "
              f"ROC AUC {res.mean_roc_auc:.3f} ({res.n_features} features, {res.n_samples} samples)")


# =============================================================================
# Results Saving
# =============================================================================

def save_results(results: Dict, save_dir: str) -> None:
    """Save analysis results to disk."""
    if 'screening_df' in results:
        results['screening_df'].to_csv(os.path.join(save_dir, 'screening_results.csv'), index=False)

    if 'significant_features' in results:
        pd.Series(results['significant_features'], name='feature').to_csv(
            os.path.join(save_dir, 'significant_features.csv'), index=False
        )

    if results.get('classification'):
        rows = [res.to_dict() for res in results['classification'].values()]
        pd.DataFrame(rows).to_csv(os.path.join(save_dir, 'classification_results.csv'), index=False)

    if 'config' in results:
        config_dict = {k: (list(v) if isinstance(v, tuple) else v) for k, v in vars(results['config']).items()}
        with open(os.path.join(save_dir, 'config.json'), 'w') as f:
            json.dump(config_dict, f, indent=4)
