import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError


DEFAULT_CONFIG: Dict[str, Any] = {
    'data': {
        'train_path': 'data/pml-training.csv',
        'eval_path': 'data/pml-testing.csv',
        'label_column': 'classe',
        'eval_id_column': 'problem_id',
        'null_values': ['NA', '', '#DIV/0!'],
        'exclude_columns': ['raw_timestamp_part_1', 'raw_timestamp_part_2', 'cvtd_timestamp'],
    },
    'filter': {
        'missing_threshold': 0.2,
    },
    'split': {
        'train_fraction': 0.8,
    },
    'training': {
        'seed': 42,
        'model_type': 'random_forest',
        'n_folds': 10,
        'n_repeats': 2,
        'n_jobs': -1,
    },
    'random_forest': {
        'n_estimators': 500,
        'mtry_grid_length': 3,
        'max_features_grid': None,
    },
    'lgbm': {
        'objective': 'multiclass',
        'n_estimators': 300,
        'learning_rate': 0.05,
        'max_depth': -1,
        'min_child_samples': 20,
        'subsample': 0.8,
        'subsample_freq': 1,
        'colsample_bytree': 0.8,
        'verbose': -1,
        'num_leaves_grid': [15, 31, 63],
    },
    'output': {
        'results_dir': 'results',
        'save_feature_importance': True,
        'verbose': True,
    },
}

MODEL_TYPES = ('random_forest', 'lightgbm')


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: Union[str, Path] = "config.yaml",
                overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Load configuration from YAML file on top of the defaults."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")

    config = _deep_merge(DEFAULT_CONFIG, loaded)
    if overrides:
        config = _deep_merge(config, overrides)

    validate_config(config)
    return config


def build_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a validated configuration from the defaults without a file."""
    config = _deep_merge(DEFAULT_CONFIG, overrides or {})
    validate_config(config)
    return config


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check value ranges of a merged configuration.

    Thresholds and fractions outside their ranges are rejected rather than
    clamped.
    """
    threshold = config['filter']['missing_threshold']
    if not isinstance(threshold, (int, float)) or isinstance(threshold, bool) or not 0 < threshold <= 1:
        raise ConfigError(f"filter.missing_threshold must be in (0, 1], got {threshold!r}")

    fraction = config['split']['train_fraction']
    if not isinstance(fraction, (int, float)) or isinstance(fraction, bool) or not 0 < fraction < 1:
        raise ConfigError(f"split.train_fraction must be in (0, 1), got {fraction!r}")

    training = config['training']
    for key in ('n_folds', 'n_repeats', 'seed'):
        if not isinstance(training[key], int) or isinstance(training[key], bool):
            raise ConfigError(f"training.{key} must be an integer, got {training[key]!r}")

    if training['n_folds'] < 2:
        raise ConfigError(f"training.n_folds must be at least 2, got {training['n_folds']}")
    if training['n_repeats'] < 1:
        raise ConfigError(f"training.n_repeats must be at least 1, got {training['n_repeats']}")
    if training['model_type'] not in MODEL_TYPES:
        raise ConfigError(
            f"training.model_type must be one of {MODEL_TYPES}, got {training['model_type']!r}"
        )

    if not config['data'].get('label_column'):
        raise ConfigError("data.label_column must be set")
