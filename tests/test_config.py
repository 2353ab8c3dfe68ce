import pytest

from dry_eye_screen.config import get_default_config, load_config, merge_config


def test_defaults():
    config = get_default_config()
    assert config['blink']['ear_threshold'] == 0.27
    assert config['blink']['consecutive_frames'] == 2
    assert config['session']['duration_seconds'] == 60
    assert config['risk'] == {'high_risk_below': 10.0, 'normal_min': 12.0,
                              'normal_max': 15.0, 'stress_from': 18.0}


def test_missing_file_falls_back_to_defaults(tmp_path, caplog):
    config = load_config(tmp_path / 'missing.yaml')
    assert config == get_default_config()
    assert 'not found' in caplog.text


def test_user_values_merge_over_defaults(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text("blink:\n  ear_threshold: 0.22\nsession:\n  duration_seconds: 30\n")
    config = load_config(path)
    assert config['blink']['ear_threshold'] == 0.22
    assert config['blink']['consecutive_frames'] == 2
    assert config['session']['duration_seconds'] == 30


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text("")
    assert load_config(path) == get_default_config()


def test_non_mapping_file_rejected(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_shipped_config_matches_defaults():
    from pathlib import Path
    shipped = Path(__file__).resolve().parent.parent / 'configs' / 'default_config.yaml'
    config = load_config(shipped)
    defaults = get_default_config()
    assert config['blink'] == defaults['blink']
    assert config['risk'] == defaults['risk']
    assert config['session'] == defaults['session']


def test_merge_does_not_mutate_base():
    base = {'a': {'b': 1}}
    merged = merge_config(base, {'a': {'c': 2}})
    assert merged == {'a': {'b': 1, 'c': 2}}
    assert base == {'a': {'b': 1}}
