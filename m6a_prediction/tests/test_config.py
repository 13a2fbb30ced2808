import pytest

from m6a_prediction.core.config import PredictionConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('M6A_THRESHOLD', 'M6A_UNMATCHED_POLICY', 'M6A_CHUNK_SIZE'):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = PredictionConfig()
    assert config.threshold == 0.5
    assert config.positive_label == 'Positive'
    assert config.unmatched_policy == 'warn'
    assert config.chunk_size is None


def test_validation():
    with pytest.raises(ValueError):
        PredictionConfig(threshold=2)
    with pytest.raises(ValueError):
        PredictionConfig(unmatched_policy='drop')
    with pytest.raises(ValueError):
        PredictionConfig(positive_label='x', negative_label='x')
    assert PredictionConfig(chunk_size=0).chunk_size is None
    assert PredictionConfig(unmatched_policy='ERROR').unmatched_policy == 'error'


def test_yaml_round_trip(tmp_path):
    path = tmp_path / 'config.yaml'
    config = PredictionConfig(threshold=0.7, unmatched_policy='ignore', chunk_size=1000)
    config.to_yaml(path)
    assert PredictionConfig.from_yaml(path) == config


def test_load_config_defaults():
    assert load_config() == PredictionConfig()


def test_environment_overrides(tmp_path, monkeypatch):
    path = tmp_path / 'config.yaml'
    PredictionConfig(threshold=0.7, chunk_size=100).to_yaml(path)

    monkeypatch.setenv('M6A_THRESHOLD', '0.9')
    monkeypatch.setenv('M6A_UNMATCHED_POLICY', 'error')
    monkeypatch.setenv('M6A_CHUNK_SIZE', '')

    config = load_config(path)
    assert config.threshold == 0.9
    assert config.unmatched_policy == 'error'
    assert config.chunk_size is None


def test_invalid_environment_value(monkeypatch):
    monkeypatch.setenv('M6A_THRESHOLD', 'abc')
    with pytest.raises(ValueError):
        load_config()
