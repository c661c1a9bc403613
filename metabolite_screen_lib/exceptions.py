"""
Exceptions raised by the differential abundance screener.

Shape and label problems abort a whole screening call. Per-feature problems
derive from FeatureNotComputableError and can be skipped by configuration.
"""


class ScreeningError(ValueError):
    """Base class for all screening errors."""


class ShapeMismatchError(ScreeningError):
    """Label count differs from row count, or the feature matrix is empty/non-numeric."""


class LabelMismatchError(ScreeningError):
    """The configured classes are not both present (at least twice) in the labels."""


class FeatureNotComputableError(ScreeningError):
    """A single feature cannot be tested. Recoverable: the rest of the batch is unaffected."""

    def __init__(self, feature_name: str, message: str):
        self.feature_name = feature_name
        super().__init__(f"Feature '{feature_name}': {message}")


class InsufficientDataError(FeatureNotComputableError):
    """One of the two groups has fewer than 2 non-missing values."""


class ZeroVarianceError(FeatureNotComputableError):
    """Both groups are constant, so the t statistic is undefined."""


class NonFiniteStatisticError(FeatureNotComputableError):
    """The t-test gave a NaN or infinite p-value, e.g. for infinite concentrations."""
