import math
from typing import Tuple

import numpy as np
import pandas as pd

from .data_loader import validate_label
from .exceptions import ConfigError, DataValidationError


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def stratum_train_size(n_rows: int, train_fraction: float) -> int:
    """
    Number of training rows taken from a stratum of n_rows.

    Strata with at least two rows keep one row on each side.
    """
    n_train = round_half_up(train_fraction * n_rows)
    if n_rows >= 2:
        n_train = min(max(n_train, 1), n_rows - 1)
    else:
        n_train = n_rows
    return n_train


def stratified_split(
    dataset: pd.DataFrame,
    label_column: str,
    train_fraction: float,
    seed: int
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Partition rows into training and validation sets stratified on the label.

    Args:
        dataset: Cleaned table indexed by row identifier
        label_column: Categorical target column
        train_fraction: Share of each class assigned to training, in (0, 1)
        seed: Seed for the shuffling generator

    Returns:
        train_set, validation_set: disjoint frames in input row order
    """
    if isinstance(train_fraction, bool) or not 0 < train_fraction < 1:
        raise ConfigError(f"train_fraction must be in (0, 1), got {train_fraction!r}")
    if len(dataset) == 0:
        raise DataValidationError("Cannot split a dataset with zero rows")
    if not dataset.index.is_unique:
        raise DataValidationError("Row identifiers must be unique to split a dataset")
    validate_label(dataset, label_column)

    rng = np.random.default_rng(seed)
    labels = dataset[label_column].to_numpy()
    positions = np.arange(len(dataset))

    train_mask = np.zeros(len(dataset), dtype=bool)
    for label in sorted(pd.unique(labels), key=str):
        stratum = positions[labels == label]
        shuffled = rng.permutation(stratum)
        n_train = stratum_train_size(len(stratum), train_fraction)
        train_mask[shuffled[:n_train]] = True

    train_set = dataset.iloc[train_mask].copy()
    validation_set = dataset.iloc[~train_mask].copy()
    return train_set, validation_set
