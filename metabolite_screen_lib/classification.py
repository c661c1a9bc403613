"""
Classifier evaluation on metabolite features.

Cross-validated accuracy of off-the-shelf classifiers (regularized logistic
regression, gradient-boosted trees). Any sklearn-compatible estimator can be
plugged in instead of a preset name.
"""

import logging
import warnings
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import lightgbm as lgb
import xgboost as xgb
from sklearn.base import BaseEstimator, clone
from sklearn.feature_selection import VarianceThreshold
from sklearn.impute import KNNImputer
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import StratifiedKFold, cross_validate
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import StandardScaler

from .params.model_params import FIXED_PARAM_PRESETS


def silence_lightgbm_warnings():
    """Configure logging to suppress LightGBM's small-data split warnings."""

    class LGBMFilter(logging.Filter):
        def filter(self, record):
            message = record.getMessage()
            if "No further splits with positive gain" in message:
                return False
            if "[LightGBM] [Warning]" in message and "best gain: -inf" in message:
                return False
            return True

    lgbm_logger = logging.getLogger('lightgbm')
    lgbm_logger.addFilter(LGBMFilter())
    warnings.filterwarnings("ignore", category=UserWarning, module="lightgbm")


class ClassifierFactory:
    @staticmethod
    def get_model_types() -> List[str]:
        return list(FIXED_PARAM_PRESETS.keys())

    @staticmethod
    def is_tree_model(model_type: str) -> bool:
        return 'LGBM' in model_type or 'XGB' in model_type

    @staticmethod
    def initialize_model(model_type: str, random_state: int = None, params: Dict[str, Any] = None):
        if model_type not in FIXED_PARAM_PRESETS:
            raise ValueError(f"Model type '{model_type}' not found. Available: {ClassifierFactory.get_model_types()}")

        model_params = dict(FIXED_PARAM_PRESETS[model_type])
        if params is not None:
            model_params.update(params)

        if model_type in ('Logit', 'Logit_l1'):
            model = LogisticRegression(random_state=random_state)
        elif model_type == 'LGBM_classifier':
            model = lgb.LGBMClassifier(random_state=random_state)
        elif model_type == 'XGB_classifier':
            model = xgb.XGBClassifier(random_state=random_state)

        return model.set_params(**model_params)

    @staticmethod
    def initialize_model_and_pipeline(model_type: str, random_state: int = None,
                                      params: Dict[str, Any] = None) -> Pipeline:
        """
        Initialize model with preprocessing pipeline.

        Tree models (LGBM, XGB) handle NaN and need no scaling.
        Logistic models get KNN imputation + scaling.
        """
        model = ClassifierFactory.initialize_model(model_type, random_state, params)

        if ClassifierFactory.is_tree_model(model_type):
            preprocessor = 'passthrough'
        else:
            preprocessor = make_pipeline(KNNImputer(n_neighbors=5), StandardScaler())

        return Pipeline([
            ('preprocessor', preprocessor),
            ('drop_constant', VarianceThreshold(threshold=0.0)),
            ('model', model)
        ])


@dataclass(frozen=True)
class ClassificationResult:
    """Cross-validated performance of one classifier."""
    model_name: str
    fold_accuracy: Tuple[float, ...]
    mean_accuracy: float
    std_accuracy: float
    fold_roc_auc: Tuple[float, ...]
    mean_roc_auc: float
    n_samples: int
    n_features: int
    feature_names: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def encode_binary_labels(labels: Sequence, class_a: str, class_b: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Map class_a -> 1, class_b -> 0.

    Returns:
        Tuple of (row mask of labeled rows, encoded targets for those rows)
    """
    label_series = labels.reset_index(drop=True) if isinstance(labels, pd.Series) else pd.Series(list(labels), dtype=object)
    is_a = label_series.eq(class_a).to_numpy(dtype=bool, na_value=False)
    is_b = label_series.eq(class_b).to_numpy(dtype=bool, na_value=False)
    keep = is_a | is_b
    return keep, is_a[keep].astype(int)


def cross_validate_classifier(
    matrix: pd.DataFrame,
    labels: Sequence,
    model: Union[str, BaseEstimator] = 'Logit',
    class_a: str = 'cachexic',
    class_b: str = 'control',
    cv_folds: int = 5,
    random_state: int = 42,
    params: Dict[str, Any] = None
) -> ClassificationResult:
    """
    Estimate how well labels are predicted from features with stratified K-fold CV.

    Args:
        matrix: Feature matrix (rows aligned with labels by position)
        labels: Class label per row; rows with other labels are ignored
        model: Preset name from FIXED_PARAM_PRESETS or any sklearn estimator
        class_a: Positive class
        class_b: Negative class
        cv_folds: Number of stratified folds
        random_state: Seed for fold shuffling and the model
        params: Overrides for the preset parameters

    Returns:
        ClassificationResult with per-fold accuracy and ROC AUC
    """
    if len(labels) != len(matrix):
        raise ValueError(f"Got {len(labels)} labels for {len(matrix)} rows")
    if matrix.shape[1] == 0:
        raise ValueError("No input features available (shape[1] == 0)")

    keep, y = encode_binary_labels(labels, class_a, class_b)
    x = matrix.iloc[np.flatnonzero(keep)]

    n_minority = int(min(y.sum(), len(y) - y.sum()))
    if n_minority < cv_folds:
        raise ValueError(f"Minority class n={n_minority} < cv_folds={cv_folds}, too few samples")

    if isinstance(model, str):
        model_name = model
        estimator = ClassifierFactory.initialize_model_and_pipeline(model, random_state=random_state, params=params)
    else:
        model_name = type(model).__name__
        estimator = clone(model)

    cv = StratifiedKFold(n_splits=cv_folds, shuffle=True, random_state=random_state)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        scores = cross_validate(estimator, x, y, cv=cv, scoring=('accuracy', 'roc_auc'),
                                error_score='raise')

    accuracy = scores['test_accuracy']
    roc_auc = scores['test_roc_auc']

    return ClassificationResult(
        model_name=model_name,
        fold_accuracy=tuple(float(a) for a in accuracy),
        mean_accuracy=float(np.mean(accuracy)),
        std_accuracy=float(np.std(accuracy)),
        fold_roc_auc=tuple(float(a) for a in roc_auc),
        mean_roc_auc=float(np.mean(roc_auc)),
        n_samples=int(len(y)),
        n_features=int(x.shape[1]),
        feature_names=tuple(str(c) for c in x.columns),
    )


def evaluate_classifiers(
    matrix: pd.DataFrame,
    labels: Sequence,
    model_types: Sequence[Union[str, BaseEstimator]] = ('Logit', 'LGBM_classifier'),
    class_a: str = 'cachexic',
    class_b: str = 'control',
    cv_folds: int = 5,
    random_state: int = 42
) -> Dict[str, ClassificationResult]:
    """Run cross_validate_classifier for each model, keyed by model name."""
    silence_lightgbm_warnings()
    results = {}
    for model in model_types:
        result = cross_validate_classifier(
            matrix, labels, model=model, class_a=class_a, class_b=class_b,
            cv_folds=cv_folds, random_state=random_state
        )
        results[result.model_name] = result
    return results
