import numpy as np
import pandas as pd
import pytest
from sklearn.metrics import accuracy_score

from activity_rf.evaluate import (
    accuracy_from_confusion,
    build_confusion_matrix,
    calculate_class_metrics,
)
from activity_rf.exceptions import DataValidationError


Y_TRUE = np.array(['A', 'A', 'B', 'B', 'B', 'C', 'C', 'E'])
Y_PRED = np.array(['A', 'B', 'B', 'B', 'C', 'C', 'C', 'D'])


def test_confusion_matrix_counts():
    matrix = build_confusion_matrix(Y_TRUE, Y_PRED)
    assert list(matrix.index) == ['A', 'B', 'C', 'D', 'E']
    assert list(matrix.columns) == ['A', 'B', 'C', 'D', 'E']
    assert matrix.loc['A', 'B'] == 1
    assert matrix.loc['B', 'B'] == 2
    assert matrix.loc['E', 'D'] == 1


def test_row_sums_match_class_counts():
    matrix = build_confusion_matrix(Y_TRUE, Y_PRED)
    row_sums = matrix.sum(axis=1)
    for label in ['A', 'B', 'C', 'E']:
        assert row_sums[label] == int((Y_TRUE == label).sum())
    assert row_sums['D'] == 0


def test_trace_over_total_is_accuracy():
    matrix = build_confusion_matrix(Y_TRUE, Y_PRED)
    assert abs(accuracy_from_confusion(matrix) - accuracy_score(Y_TRUE, Y_PRED)) < 1e-9
    assert accuracy_from_confusion(matrix) == pytest.approx(5 / 8)


def test_explicit_label_order():
    matrix = build_confusion_matrix(Y_TRUE, Y_PRED, labels=['E', 'D', 'C', 'B', 'A'])
    assert list(matrix.index) == ['E', 'D', 'C', 'B', 'A']


def test_length_mismatch_raises():
    with pytest.raises(DataValidationError):
        build_confusion_matrix(Y_TRUE, Y_PRED[:-1])


def test_empty_inputs_raise():
    with pytest.raises(DataValidationError):
        build_confusion_matrix([], [], labels=['A'])


def test_all_zero_matrix_accuracy_raises():
    matrix = pd.DataFrame(np.zeros((2, 2), dtype=int), index=['A', 'B'], columns=['A', 'B'])
    with pytest.raises(DataValidationError):
        accuracy_from_confusion(matrix)


def test_class_metrics_have_each_true_class():
    report = calculate_class_metrics(Y_TRUE, Y_PRED)
    assert report['B']['recall'] == pytest.approx(2 / 3)
    assert 'macro avg' in report
