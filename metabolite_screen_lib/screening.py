"""
Differential Abundance Screening

Per-metabolite comparison of two predefined classes.
Uses two-sample t-tests (Welch by default) with Bonferroni correction.
"""

import warnings
from dataclasses import dataclass, asdict, fields, replace
from typing import List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy.stats import ttest_ind
from statsmodels.stats.multitest import multipletests

from .config import ON_ERROR_OPTIONS, ScreeningConfig
from .exceptions import (
    FeatureNotComputableError,
    InsufficientDataError,
    LabelMismatchError,
    NonFiniteStatisticError,
    ShapeMismatchError,
    ZeroVarianceError,
)

STATUS_OK = 'ok'
STATUS_NOT_COMPUTABLE = 'not_computable'

MIN_GROUP_SIZE = 2


@dataclass(frozen=True)
class FeatureResult:
    """
    Screening outcome for a single feature.

    Numeric fields are NaN and is_significant is False when status is
    'not_computable'; reason then holds the error message.
    """
    feature_name: str
    mean_difference: float
    raw_p_value: float
    corrected_p_value: float
    is_significant: bool
    status: str = STATUS_OK
    reason: Optional[str] = None
    t_statistic: float = np.nan
    mean_a: float = np.nan
    mean_b: float = np.nan
    n_a: int = 0
    n_b: int = 0
    fdr_q_value: float = np.nan

    @property
    def is_computable(self) -> bool:
        return self.status == STATUS_OK


def bonferroni_correct(raw_p_values, n_tests: int, cap: bool = False):
    """
    Multiply p-values by the number of tests.

    Not clamped to 1.0 unless cap=True. Scalars in, float out.
    """
    if n_tests < 1:
        raise ValueError(f"n_tests ({n_tests}) must be at least 1")
    corrected = np.asarray(raw_p_values, dtype=float) * n_tests
    if cap:
        corrected = np.minimum(corrected, 1.0)
    if corrected.ndim == 0:
        return float(corrected)
    return corrected


class DifferentialAbundanceScreener:
    """
    Screener for features that differ in mean between two classes.

    Every feature of the input matrix yields exactly one FeatureResult, in
    column order. The Bonferroni multiplier is the column count of the matrix
    passed to screen(), fixed for the whole call.
    """

    def __init__(self,
                 class_a: str,
                 class_b: str,
                 alpha: float = 0.05,
                 equal_var: bool = False,
                 on_error: str = 'raise',
                 cap_corrected: bool = False,
                 n_jobs: int = 1):
        """
        Initialize the screener.

        Args:
            class_a: Label of the first group
            class_b: Label of the second group
            alpha: Significance threshold for corrected p-values
            equal_var: If True use Student's t-test, otherwise Welch's
            on_error: 'raise' aborts on the first non-computable feature,
                      'skip' reports it with status 'not_computable'
            cap_corrected: If True, cap corrected p-values at 1.0
            n_jobs: Worker threads for the per-feature loop
        """
        if on_error not in ON_ERROR_OPTIONS:
            raise ValueError(f"on_error must be 'raise' or 'skip', got '{on_error}'")
        self.class_a = class_a
        self.class_b = class_b
        self.alpha = alpha
        self.equal_var = equal_var
        self.on_error = on_error
        self.cap_corrected = cap_corrected
        self.n_jobs = n_jobs

    @classmethod
    def from_config(cls, config: ScreeningConfig) -> 'DifferentialAbundanceScreener':
        return cls(
            class_a=config.class_a,
            class_b=config.class_b,
            alpha=config.alpha,
            equal_var=config.equal_var,
            on_error=config.on_error,
            cap_corrected=config.cap_corrected,
            n_jobs=config.n_jobs,
        )

    def screen(self,
               matrix: Union[pd.DataFrame, Mapping[str, Sequence[float]]],
               labels: Sequence) -> List[FeatureResult]:
        """
        Test every feature of matrix for a mean difference between the classes.

        Args:
            matrix: Numeric features, one column per feature (rows = samples)
            labels: Class label per row, aligned by position

        Returns:
            List of FeatureResult, one per input column, in column order
        """
        df = _as_frame(matrix)
        mask_a, mask_b = self._validate(df, labels)

        n_features = df.shape[1]
        names = list(df.columns)
        columns = [df.iloc[:, i].to_numpy(dtype=float, na_value=np.nan) for i in range(n_features)]

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            if self.n_jobs == 1:
                outcomes = [self._test_feature(name, values, mask_a, mask_b)
                            for name, values in zip(names, columns)]
            else:
                outcomes = Parallel(n_jobs=self.n_jobs, prefer='threads')(
                    delayed(self._test_feature)(name, values, mask_a, mask_b)
                    for name, values in zip(names, columns)
                )

        results = []
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, FeatureNotComputableError):
                if self.on_error == 'raise':
                    raise outcome
                results.append(_not_computable_result(name, outcome))
                continue

            corrected = bonferroni_correct(outcome['raw_p_value'], n_features, cap=self.cap_corrected)
            results.append(FeatureResult(
                feature_name=name,
                corrected_p_value=corrected,
                is_significant=bool(corrected < self.alpha),
                **outcome
            ))

        return _add_fdr_q_values(results)

    def _validate(self, df: pd.DataFrame, labels: Sequence):
        """Check shape and class configuration, return the two row masks."""
        if df.shape[1] == 0:
            raise ShapeMismatchError("Feature matrix has no columns")
        if df.shape[0] == 0:
            raise ShapeMismatchError("Feature matrix has no rows")

        if isinstance(labels, pd.Series):
            label_series = labels.reset_index(drop=True)
        else:
            label_series = pd.Series(list(labels), dtype=object)

        if len(label_series) != df.shape[0]:
            raise ShapeMismatchError(
                f"Got {len(label_series)} labels for {df.shape[0]} rows"
            )

        non_numeric = [name for name, dtype in zip(df.columns, df.dtypes)
                       if not pd.api.types.is_numeric_dtype(dtype)]
        if non_numeric:
            raise ShapeMismatchError(f"Non-numeric feature columns: {non_numeric}")

        if self.class_a == self.class_b:
            raise LabelMismatchError(f"class_a and class_b are both '{self.class_a}'")

        mask_a = label_series.eq(self.class_a).to_numpy(dtype=bool, na_value=False)
        mask_b = label_series.eq(self.class_b).to_numpy(dtype=bool, na_value=False)
        for cls, mask in ((self.class_a, mask_a), (self.class_b, mask_b)):
            if mask.sum() < MIN_GROUP_SIZE:
                raise LabelMismatchError(
                    f"Class '{cls}' has {int(mask.sum())} labeled rows, need at least {MIN_GROUP_SIZE}"
                )

        return mask_a, mask_b

    def _test_feature(self, name: str, values: np.ndarray, mask_a: np.ndarray, mask_b: np.ndarray):
        """Run the t-test on one column. Errors are returned, not raised."""
        group_a = values[mask_a]
        group_b = values[mask_b]
        group_a = group_a[~np.isnan(group_a)]
        group_b = group_b[~np.isnan(group_b)]

        if len(group_a) < MIN_GROUP_SIZE or len(group_b) < MIN_GROUP_SIZE:
            return InsufficientDataError(
                name,
                f"need at least {MIN_GROUP_SIZE} non-missing values per group, "
                f"got {self.class_a}={len(group_a)}, {self.class_b}={len(group_b)}"
            )

        if np.ptp(group_a) == 0 and np.ptp(group_b) == 0:
            return ZeroVarianceError(name, "both groups have zero variance")

        mean_a, mean_b = float(np.mean(group_a)), float(np.mean(group_b))
        test = ttest_ind(group_a, group_b, equal_var=self.equal_var)
        if not np.isfinite(test.pvalue):
            return NonFiniteStatisticError(name, f"t-test returned p-value {test.pvalue}")

        return {
            'mean_difference': mean_a - mean_b,
            'raw_p_value': float(test.pvalue),
            't_statistic': float(test.statistic),
            'mean_a': mean_a,
            'mean_b': mean_b,
            'n_a': len(group_a),
            'n_b': len(group_b),
        }


def _as_frame(matrix) -> pd.DataFrame:
    if isinstance(matrix, pd.DataFrame):
        return matrix
    if isinstance(matrix, Mapping):
        return pd.DataFrame(dict(matrix))
    raise TypeError(f"matrix must be a DataFrame or a mapping of columns, got {type(matrix).__name__}")


def _not_computable_result(name: str, error: FeatureNotComputableError) -> FeatureResult:
    return FeatureResult(
        feature_name=name,
        mean_difference=np.nan,
        raw_p_value=np.nan,
        corrected_p_value=np.nan,
        is_significant=False,
        status=STATUS_NOT_COMPUTABLE,
        reason=str(error),
    )


def _add_fdr_q_values(results: List[FeatureResult]) -> List[FeatureResult]:
    """Attach informational FDR-BH q-values over the computable features."""
    computable = [i for i, r in enumerate(results) if r.is_computable]
    if not computable:
        return results

    pvals = np.array([results[i].raw_p_value for i in computable], dtype=float)
    keep = np.isfinite(pvals)
    if not keep.any():
        return results

    qvals = np.full(pvals.shape, np.nan, dtype=float)
    _, qvals[keep], _, _ = multipletests(pvals[keep], method='fdr_bh', is_sorted=False, returnsorted=False)

    results = list(results)
    for i, q in zip(computable, qvals):
        results[i] = replace(results[i], fdr_q_value=float(q))
    return results


def screen(matrix: Union[pd.DataFrame, Mapping[str, Sequence[float]]],
           labels: Sequence,
           class_a: str,
           class_b: str,
           alpha: float = 0.05,
           equal_var: bool = False,
           on_error: str = 'raise',
           cap_corrected: bool = False,
           n_jobs: int = 1) -> List[FeatureResult]:
    """
    Convenience function to screen all features of a matrix.

    Args:
        matrix: Numeric features, one column per feature
        labels: Class label per row, aligned by position
        class_a: Label of the first group
        class_b: Label of the second group
        alpha: Significance threshold after Bonferroni correction
        equal_var: Student (True) or Welch (False) t-test
        on_error: 'raise' or 'skip' for non-computable features
        cap_corrected: Cap corrected p-values at 1.0
        n_jobs: Worker threads for the per-feature loop

    Returns:
        List of FeatureResult in input column order
    """
    screener = DifferentialAbundanceScreener(
        class_a=class_a,
        class_b=class_b,
        alpha=alpha,
        equal_var=equal_var,
        on_error=on_error,
        cap_corrected=cap_corrected,
        n_jobs=n_jobs
    )
    return screener.screen(matrix, labels)


def results_to_frame(results: List[FeatureResult]) -> pd.DataFrame:
    """One row per feature, input order, with a -log10_p column for plotting."""
    columns = [f.name for f in fields(FeatureResult)]
    res = pd.DataFrame([asdict(r) for r in results], columns=columns)
    with np.errstate(divide='ignore'):
        res['-log10_p'] = -np.log10(res['raw_p_value'].astype(float))
    return res


def significant_features(results: List[FeatureResult]) -> List[str]:
    """Names of significant features, in input order."""
    return [r.feature_name for r in results if r.is_significant]
