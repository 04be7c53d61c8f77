from typing import Iterable, List, Optional

import pandas as pd
from pandas.api import types as ptypes

from .exceptions import ColumnMismatchError, ConfigError, DataValidationError


def _check_threshold(threshold: float) -> None:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not 0 <= threshold <= 1:
        raise ConfigError(f"Missing-value threshold must be in [0, 1], got {threshold!r}")


def missingness(dataset: pd.DataFrame) -> pd.Series:
    """
    Fraction of rows per column that are missing.

    Empty strings count as missing in text-typed columns.
    """
    if len(dataset) == 0:
        raise DataValidationError("Missingness is undefined for a dataset with zero rows")

    fractions = {}
    for col in dataset.columns:
        series = dataset[col]
        absent = series.isna()
        if ptypes.is_object_dtype(series) or ptypes.is_string_dtype(series):
            absent = absent | (series == '').fillna(False).astype(bool)
        fractions[col] = float(absent.mean())

    return pd.Series(fractions, index=dataset.columns, dtype=float)


def filter_columns(dataset: pd.DataFrame, threshold: float) -> pd.DataFrame:
    """
    Keep the columns whose missingness is strictly below threshold.

    Args:
        dataset: Input table
        threshold: Missing fraction in [0, 1]; 0 keeps nothing

    Returns:
        A new DataFrame with the retained columns in their original order
    """
    _check_threshold(threshold)
    fractions = missingness(dataset)
    keep = [col for col in dataset.columns if fractions[col] < threshold]
    return dataset.loc[:, keep].copy()


class FeatureFilter:
    """Column selection learned from training data and replayed on other data."""

    def __init__(self, threshold: float, exclude_columns: Iterable[str] = ()):
        _check_threshold(threshold)
        self.threshold = threshold
        self.exclude_columns = list(exclude_columns)
        self.retained_columns: Optional[List[str]] = None
        self.dropped_columns: List[str] = []
        self.missingness_: Optional[pd.Series] = None

    def fit(self, train: pd.DataFrame) -> "FeatureFilter":
        """Compute the retained column set from the training data alone."""
        self.missingness_ = missingness(train)
        excluded = set(self.exclude_columns)
        self.retained_columns = [
            col for col in train.columns
            if col not in excluded and self.missingness_[col] < self.threshold
        ]
        self.dropped_columns = [col for col in train.columns if col not in self.retained_columns]
        return self

    def transform(self, dataset: pd.DataFrame, required: Optional[Iterable[str]] = None,
                  context: str = "dataset") -> pd.DataFrame:
        """
        Select the retained columns from dataset.

        Columns listed in ``required`` (all retained columns by default) must be
        present; the others are carried along when the dataset has them.
        """
        if self.retained_columns is None:
            raise ValueError("FeatureFilter has not been fitted yet")

        required_cols = self.retained_columns if required is None else list(required)
        missing = [col for col in required_cols if col not in dataset.columns]
        if missing:
            raise ColumnMismatchError(missing, context=context)

        keep = [col for col in self.retained_columns if col in dataset.columns]
        return dataset.loc[:, keep].copy()

    def fit_transform(self, train: pd.DataFrame) -> pd.DataFrame:
        return self.fit(train).transform(train, context="training data")
