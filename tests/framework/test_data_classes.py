import numpy as np
import pandas as pd
import pytest

from veracity_ml.framework.data_classes import (
    CVResult,
    ConfusionMatrix,
    FeatureDataset,
    FoldPlan,
    ROCCurve,
    SearchResult
)


def test_dataset_requires_matching_index():
    features = pd.DataFrame({'a': [1.0, 2.0]}, index=[0, 1])
    labels = pd.Series([True, False], index=[1, 2])
    with pytest.raises(ValueError):
        FeatureDataset(features=features, labels=labels)


def test_take_keeps_original_index(separable_dataset):
    subset = separable_dataset.take([5, 2, 9])
    assert list(subset.index) == [5, 2, 9]
    assert len(subset) == 3
    assert subset.schema == separable_dataset.schema


def test_fold_plan_splits():
    plan = FoldPlan(repetition=0, n_folds=2, fold_ids=[0, 1, 0, 1, 1])
    splits = list(plan.splits())

    assert [fold for fold, _, _ in splits] == [0, 1]
    np.testing.assert_array_equal(splits[0][1], [1, 3, 4])
    np.testing.assert_array_equal(splits[0][2], [0, 2])


def test_cv_result_viability():
    scored = CVResult(grid_index=0, params={'mixing': 0.0}, scores=(0.5, 1.0))
    failed = CVResult(grid_index=1, params={'mixing': 1.0}, scores=(0.7,), failure='ConvergenceError: no')

    assert scored.viable and scored.mean_score == pytest.approx(0.75)
    assert not failed.viable and failed.mean_score is None

    frame = SearchResult(best_params={'mixing': 0.0}, best_index=0, best_mean_score=0.75,
                         cv_results=(scored, failed)).to_frame()
    assert list(frame['grid_index']) == [0, 1]
    assert frame.loc[1, 'failure'].startswith('ConvergenceError')


def test_roc_curve_frame_and_youden():
    curve = ROCCurve(false_positive_rates=(0.0, 0.5, 1.0), true_positive_rates=(0.0, 1.0, 1.0),
                     thresholds=(0.9, 0.4, float('-inf')))
    assert curve.youden_j() == (0.0, 0.5, 0.0)
    assert list(curve.to_frame().columns) == ['threshold', 'false_positive_rate', 'true_positive_rate']


def test_youden_numerators_are_exact():
    curve = ROCCurve(false_positive_rates=(0.0, 0.5, 1.0), true_positive_rates=(0.0, 1.0, 1.0),
                     thresholds=(0.9, 0.4, float('-inf')),
                     true_positive_counts=(0, 2, 2), false_positive_counts=(0, 1, 2))
    assert curve.youden_j_numerators() == (0, 2, 0)

    with pytest.raises(ValueError):
        ROCCurve(false_positive_rates=(0.0,), true_positive_rates=(0.0,), thresholds=(0.5,)).youden_j_numerators()


def test_confusion_matrix_total():
    assert ConfusionMatrix(true_positives=3, false_positives=1, true_negatives=4, false_negatives=2).total == 10
