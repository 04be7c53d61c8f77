import pytest
import yaml

from activity_rf.config import DEFAULT_CONFIG, build_config, load_config
from activity_rf.exceptions import ConfigError


def test_defaults_match_original_analysis():
    config = build_config()
    assert config['filter']['missing_threshold'] == 0.2
    assert config['split']['train_fraction'] == 0.8
    assert config['training']['n_folds'] == 10
    assert config['training']['n_repeats'] == 2
    assert config['data']['label_column'] == 'classe'


def test_load_config_merges_onto_defaults(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({'filter': {'missing_threshold': 0.5}, 'training': {'n_folds': 5}}))

    config = load_config(path)

    assert config['filter']['missing_threshold'] == 0.5
    assert config['training']['n_folds'] == 5
    assert config['training']['n_repeats'] == 2
    assert DEFAULT_CONFIG['training']['n_folds'] == 10


def test_load_config_overrides(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('')
    config = load_config(path, overrides={'training': {'seed': 99}})
    assert config['training']['seed'] == 99


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / 'absent.yaml')


def test_non_mapping_root(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('- just\n- a list\n')
    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize("overrides", [
    {'filter': {'missing_threshold': 0}},
    {'filter': {'missing_threshold': 1.01}},
    {'filter': {'missing_threshold': 'high'}},
    {'split': {'train_fraction': 1.0}},
    {'split': {'train_fraction': 0}},
    {'training': {'n_folds': 1}},
    {'training': {'n_repeats': 0}},
    {'training': {'seed': 1.5}},
    {'training': {'model_type': 'svm'}},
    {'data': {'label_column': ''}},
])
def test_rejects_invalid_values(overrides):
    with pytest.raises(ConfigError):
        build_config(overrides)


def test_threshold_of_one_is_allowed():
    assert build_config({'filter': {'missing_threshold': 1}})['filter']['missing_threshold'] == 1


def test_repository_config_is_valid():
    from pathlib import Path
    config = load_config(Path(__file__).resolve().parent.parent / 'config.yaml')
    assert config['training']['model_type'] == 'random_forest'
