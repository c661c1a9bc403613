import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

CLASS_A = 'cachexic'
CLASS_B = 'control'


@pytest.fixture
def labels():
    return [CLASS_A] * 5 + [CLASS_B] * 5


@pytest.fixture
def three_feature_matrix():
    """3 features x 10 samples, 5 per class."""
    return pd.DataFrame({
        # Identical values in both classes
        'Creatinine': [1.0, 2.0, 3.0, 4.0, 5.0, 1.0, 2.0, 3.0, 4.0, 5.0],
        # Large consistent shift, low variance
        'Glucose': [100.0, 101.0, 99.0, 100.5, 99.5, 10.0, 11.0, 9.0, 10.5, 9.5],
        'Alanine': [5.0, 7.0, 6.0, 8.0, 4.0, 5.0, 6.0, 7.0, 6.0, 5.0],
    })


@pytest.fixture
def separable_data():
    """60 samples, 5 features, first two strongly shifted between classes."""
    rng = np.random.default_rng(0)
    n = 30
    a = rng.normal(0.0, 1.0, size=(n, 5))
    b = rng.normal(0.0, 1.0, size=(n, 5))
    a[:, :2] += 4.0
    matrix = pd.DataFrame(np.vstack([a, b]), columns=[f'met_{i}' for i in range(5)])
    labels = [CLASS_A] * n + [CLASS_B] * n
    return matrix, labels
