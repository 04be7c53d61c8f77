"""Shared fixtures: small synthetic wearable-sensor tables."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pandas as pd
import pytest

from activity_rf.config import build_config

CLASSES = ['A', 'B', 'C', 'D', 'E']
USERS = ['adelmo', 'carlitos', 'charles', 'eurico']


def make_sensor_frame(rows_per_class: int = 20, seed: int = 0, sparse_fraction: float = 0.9) -> pd.DataFrame:
    """
    Ten-column table: label, two categorical columns, six class-dependent
    numeric sensor columns and one mostly-missing summary column.
    """
    rng = np.random.default_rng(seed)
    n_rows = rows_per_class * len(CLASSES)
    labels = np.repeat(CLASSES, rows_per_class)
    class_idx = np.repeat(np.arange(len(CLASSES)), rows_per_class)

    frame = pd.DataFrame({
        'user_name': rng.choice(USERS, size=n_rows),
        'new_window': rng.choice(['no', 'yes'], size=n_rows, p=[0.9, 0.1]),
        'roll_belt': class_idx * 10.0 + rng.normal(0, 1, n_rows),
        'pitch_belt': class_idx * -5.0 + rng.normal(0, 1, n_rows),
        'yaw_belt': rng.normal(0, 1, n_rows),
        'total_accel_belt': class_idx * 2.0 + rng.normal(0, 0.5, n_rows),
        'gyros_arm_x': rng.normal(0, 1, n_rows),
        'magnet_dumbbell_z': class_idx * 3.0 + rng.normal(0, 1, n_rows),
        'max_roll_belt': rng.normal(0, 1, n_rows),
        'classe': labels,
    })

    n_sparse = int(round(sparse_fraction * n_rows))
    sparse_rows = rng.choice(n_rows, size=n_sparse, replace=False)
    frame.loc[sparse_rows, 'max_roll_belt'] = np.nan

    frame.index = pd.RangeIndex(1, n_rows + 1, name='row_id')
    return frame


@pytest.fixture
def sensor_frame():
    return make_sensor_frame()


@pytest.fixture
def eval_frame():
    frame = make_sensor_frame(rows_per_class=4, seed=7, sparse_fraction=1.0).drop(columns=['classe'])
    frame['problem_id'] = np.arange(1, len(frame) + 1)
    return frame


@pytest.fixture
def fast_config(tmp_path):
    return build_config({
        'data': {'exclude_columns': []},
        'training': {'n_folds': 3, 'n_repeats': 1, 'n_jobs': 1, 'seed': 7},
        'random_forest': {'n_estimators': 25},
        'lgbm': {'n_estimators': 20, 'min_child_samples': 2, 'num_leaves_grid': [4, 8]},
        'output': {'results_dir': str(tmp_path / 'results'), 'verbose': False},
    })
