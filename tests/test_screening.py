"""
Tests for the differential abundance screener: ordering, Bonferroni
correction, significance, symmetry and missing-value handling.
"""

from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from metabolite_screen_lib import screening
from metabolite_screen_lib.screening import (
    DifferentialAbundanceScreener,
    bonferroni_correct,
    results_to_frame,
    screen,
    significant_features,
)
from metabolite_screen_lib.config import ScreeningConfig

CLASS_A = 'cachexic'
CLASS_B = 'control'


def test_one_result_per_column_in_input_order(three_feature_matrix, labels):
    matrix = three_feature_matrix[['Alanine', 'Glucose', 'Creatinine']]
    results = screen(matrix, labels, CLASS_A, CLASS_B)

    assert len(results) == matrix.shape[1]
    assert [r.feature_name for r in results] == ['Alanine', 'Glucose', 'Creatinine']


def test_identical_distributions_not_significant(three_feature_matrix, labels):
    results = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    creatinine = results[0]

    assert creatinine.raw_p_value == pytest.approx(1.0)
    assert creatinine.mean_difference == pytest.approx(0.0)
    assert creatinine.is_significant is False


def test_large_shift_is_significant(three_feature_matrix, labels):
    results = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    glucose = results[1]

    assert glucose.is_significant is True
    assert glucose.mean_difference == pytest.approx(90.0)
    assert glucose.mean_a == pytest.approx(100.0)
    assert glucose.mean_b == pytest.approx(10.0)
    assert glucose.n_a == 5 and glucose.n_b == 5
    assert glucose.t_statistic > 0


def test_bonferroni_uses_total_feature_count(three_feature_matrix, labels):
    results = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    for r in results:
        assert r.corrected_p_value == r.raw_p_value * 3


def test_significance_matches_threshold(three_feature_matrix, labels):
    for alpha in (0.001, 0.05, 0.5):
        for r in screen(three_feature_matrix, labels, CLASS_A, CLASS_B, alpha=alpha):
            if r.is_significant:
                assert r.corrected_p_value < alpha
            else:
                assert r.corrected_p_value >= alpha


def test_swapping_classes_negates_mean_difference(three_feature_matrix, labels):
    forward = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    backward = screen(three_feature_matrix, labels, CLASS_B, CLASS_A)

    for f, b in zip(forward, backward):
        assert b.mean_difference == -f.mean_difference
        assert b.raw_p_value == pytest.approx(f.raw_p_value)
        assert b.corrected_p_value == pytest.approx(f.corrected_p_value)


def test_raw_significance_flipped_by_correction(monkeypatch):
    # 63 metabolites, every raw p-value fixed at 0.001
    monkeypatch.setattr(
        screening, 'ttest_ind',
        lambda a, b, equal_var=False: SimpleNamespace(statistic=3.9, pvalue=0.001)
    )
    rng = np.random.default_rng(1)
    matrix = pd.DataFrame(rng.normal(size=(10, 63)), columns=[f'm{i}' for i in range(63)])
    labels = [CLASS_A] * 5 + [CLASS_B] * 5

    results = screen(matrix, labels, CLASS_A, CLASS_B, alpha=0.05)

    assert len(results) == 63
    for r in results:
        assert r.raw_p_value == 0.001
        assert r.corrected_p_value == pytest.approx(0.063)
        assert r.is_significant is False


def test_bonferroni_correct_scalar_and_uncapped():
    assert bonferroni_correct(0.001, 63) == pytest.approx(0.063)
    assert bonferroni_correct(0.5, 63) == pytest.approx(31.5)
    assert bonferroni_correct(0.5, 63, cap=True) == 1.0


def test_bonferroni_correct_array():
    corrected = bonferroni_correct([0.01, 0.2], 10)
    np.testing.assert_allclose(corrected, [0.1, 2.0])


def test_bonferroni_correct_rejects_zero_tests():
    with pytest.raises(ValueError):
        bonferroni_correct(0.01, 0)


def test_corrected_p_value_can_exceed_one(three_feature_matrix, labels):
    creatinine = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)[0]
    assert creatinine.corrected_p_value == pytest.approx(3.0)


def test_cap_corrected_clamps_to_one(three_feature_matrix, labels):
    creatinine = screen(three_feature_matrix, labels, CLASS_A, CLASS_B, cap_corrected=True)[0]
    assert creatinine.corrected_p_value == 1.0


def test_missing_value_is_excluded_not_imputed(three_feature_matrix, labels):
    with_nan = three_feature_matrix.copy()
    with_nan.loc[0, 'Alanine'] = np.nan

    dropped = three_feature_matrix.drop(index=0).reset_index(drop=True)
    dropped_labels = labels[1:]

    r_nan = screen(with_nan, labels, CLASS_A, CLASS_B)[2]
    r_dropped = screen(dropped, dropped_labels, CLASS_A, CLASS_B)[2]

    assert r_nan.n_a == 4
    assert r_nan.mean_a == pytest.approx(np.mean([7.0, 6.0, 8.0, 4.0]))
    assert r_nan.mean_difference == pytest.approx(r_dropped.mean_difference)
    assert r_nan.raw_p_value == pytest.approx(r_dropped.raw_p_value)


def test_rows_with_other_labels_are_ignored(three_feature_matrix, labels):
    extra = pd.DataFrame({'Creatinine': [1000.0, -1000.0],
                          'Glucose': [1000.0, -1000.0],
                          'Alanine': [1000.0, -1000.0]})
    matrix = pd.concat([three_feature_matrix, extra], ignore_index=True)
    extended_labels = labels + ['unknown', None]

    base = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    extended = screen(matrix, extended_labels, CLASS_A, CLASS_B)

    for b, e in zip(base, extended):
        assert e.mean_difference == pytest.approx(b.mean_difference)
        assert e.raw_p_value == pytest.approx(b.raw_p_value)


def test_labels_aligned_by_position_not_index(three_feature_matrix, labels):
    series = pd.Series(labels, index=list(range(9, -1, -1)))
    from_series = screen(three_feature_matrix, series, CLASS_A, CLASS_B)
    from_list = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)

    assert [r.mean_difference for r in from_series] == [r.mean_difference for r in from_list]


def test_student_and_welch_differ_on_unequal_variances():
    matrix = pd.DataFrame({'x': [1.0, 2.0, 3.0, 20.0, 40.0, 0.5, 0.6, 0.7]})
    labels = [CLASS_A] * 5 + [CLASS_B] * 3

    welch = screen(matrix, labels, CLASS_A, CLASS_B)[0]
    student = screen(matrix, labels, CLASS_A, CLASS_B, equal_var=True)[0]

    assert welch.mean_difference == student.mean_difference
    assert welch.raw_p_value != pytest.approx(student.raw_p_value)


def test_parallel_matches_sequential(three_feature_matrix, labels):
    sequential = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    parallel = screen(three_feature_matrix, labels, CLASS_A, CLASS_B, n_jobs=2)

    assert [r.feature_name for r in parallel] == [r.feature_name for r in sequential]
    for s, p in zip(sequential, parallel):
        assert p.raw_p_value == s.raw_p_value
        assert p.corrected_p_value == s.corrected_p_value


def test_mapping_input_is_accepted(labels):
    matrix = {'b': [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0],
              'a': [5.0, 4.0, 3.0, 2.0, 1.0, 1.0, 2.0, 3.0, 4.0, 5.0]}
    results = screen(matrix, labels, CLASS_A, CLASS_B)
    assert [r.feature_name for r in results] == ['b', 'a']


def test_inputs_are_not_modified(three_feature_matrix, labels):
    before = three_feature_matrix.copy()
    labels_before = list(labels)
    screen(three_feature_matrix, labels, CLASS_A, CLASS_B)

    pd.testing.assert_frame_equal(three_feature_matrix, before)
    assert labels == labels_before


def test_fdr_q_values_are_informational(three_feature_matrix, labels):
    results = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    for r in results:
        assert r.fdr_q_value >= r.raw_p_value - 1e-12
        assert r.fdr_q_value <= 1.0


def test_screener_from_config(three_feature_matrix, labels):
    config = ScreeningConfig(class_a=CLASS_A, class_b=CLASS_B, alpha=0.01, cap_corrected=True)
    screener = DifferentialAbundanceScreener.from_config(config)

    assert screener.alpha == 0.01
    results = screener.screen(three_feature_matrix, labels)
    assert results[0].corrected_p_value == 1.0


def test_results_frame_and_significant_features(three_feature_matrix, labels):
    results = screen(three_feature_matrix, labels, CLASS_A, CLASS_B)
    df = results_to_frame(results)

    assert df['feature_name'].tolist() == ['Creatinine', 'Glucose', 'Alanine']
    assert {'mean_difference', 'raw_p_value', 'corrected_p_value',
            'is_significant', 'status', '-log10_p'} <= set(df.columns)
    assert significant_features(results) == ['Glucose']


def test_infinite_concentration_does_not_blank_fdr(labels):
    matrix = pd.DataFrame({
        'good': [100.0, 101.0, 99.0, 100.5, 99.5, 10.0, 11.0, 9.0, 10.5, 9.5],
        'inf': [np.inf, 2.0, 3.0, 4.0, 5.0, 2.0, 3.0, 4.0, 5.0, 6.0],
    })
    good, bad = screen(matrix, labels, CLASS_A, CLASS_B, on_error='skip')

    assert good.is_computable
    assert np.isfinite(good.fdr_q_value)
    assert good.fdr_q_value == pytest.approx(good.raw_p_value)
    assert good.corrected_p_value == good.raw_p_value * 2

    assert bad.status == screening.STATUS_NOT_COMPUTABLE
    assert np.isnan(bad.fdr_q_value)


def test_repeated_column_names_screened_by_position(labels):
    values = np.column_stack([
        [1.0, 2.0, 3.0, 4.0, 5.0, 1.0, 2.0, 3.0, 4.0, 5.0],
        [50.0, 51.0, 52.0, 53.0, 54.0, 1.0, 2.0, 3.0, 4.0, 5.0],
    ])
    matrix = pd.DataFrame(values, columns=['x', 'x'])

    results = screen(matrix, labels, CLASS_A, CLASS_B)

    assert [r.feature_name for r in results] == ['x', 'x']
    assert results[0].mean_difference == pytest.approx(0.0)
    assert results[1].mean_difference == pytest.approx(49.0)
    assert results[1].is_significant is True
