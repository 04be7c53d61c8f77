from typing import Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import classification_report, confusion_matrix

from .exceptions import DataValidationError


def build_confusion_matrix(
    y_true: Sequence,
    y_pred: Sequence,
    labels: Optional[Sequence] = None
) -> pd.DataFrame:
    """
    Count validation rows by (true class, predicted class).

    Args:
        y_true: True labels
        y_pred: Predicted labels
        labels: Class order; defaults to the sorted union of both inputs

    Returns:
        Square DataFrame, rows indexed by true class, columns by predicted class
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if len(y_true) != len(y_pred):
        raise DataValidationError(
            f"Label vectors differ in length: {len(y_true)} true vs {len(y_pred)} predicted"
        )
    if len(y_true) == 0:
        raise DataValidationError("Cannot build a confusion matrix from no rows")

    if labels is None:
        labels = sorted(set(y_true.tolist()) | set(y_pred.tolist()), key=str)
    labels = list(labels)

    matrix = confusion_matrix(y_true, y_pred, labels=labels)
    return pd.DataFrame(
        matrix,
        index=pd.Index(labels, name='true'),
        columns=pd.Index(labels, name='predicted'),
    )


def accuracy_from_confusion(matrix: pd.DataFrame) -> float:
    """Overall accuracy as trace / total."""
    total = int(matrix.to_numpy().sum())
    if total == 0:
        raise DataValidationError("Accuracy is undefined for an empty confusion matrix")
    return float(np.trace(matrix.to_numpy())) / total


def calculate_class_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> dict:
    """Precision, recall, F1 and support keyed by class, plus the macro and weighted averages."""
    return classification_report(y_true, y_pred, output_dict=True, zero_division=0)


def print_evaluation_summary(result) -> None:
    """Print a comprehensive evaluation summary."""
    print("=" * 60)
    print("EVALUATION SUMMARY")
    print("=" * 60)
    print(f"Cross-validated accuracy ({result.resampling.describe()}): {result.cv_accuracy:.4f}")
    print(f"Validation accuracy: {result.validation_accuracy:.4f}")
    print(f"Expected out-of-sample error: {1.0 - result.validation_accuracy:.4f}")
    print(f"Selected parameters: {result.best_params}")

    print("\nConfusion matrix (rows: true, columns: predicted):")
    print(result.confusion_matrix.to_string())

    per_class = {k: v for k, v in result.class_metrics.items() if isinstance(v, dict)}
    report = pd.DataFrame(per_class).T
    print("\nPer-class metrics:")
    print(report.round(4).to_string())
    print("=" * 60)
