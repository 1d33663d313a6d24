#!filepath: tests/config/test_app_config.py
import pytest
import yaml
from pydantic import ValidationError

from foresee.config import AppConfig, LogConfig, TrainingConfig


@pytest.fixture
def sample_config_file(tmp_path):
    data = {
        "log": {
            "dir": None,
            "rotation": "1 day",
            "retention": "7 days",
            "level": "DEBUG",
        },
        "training": {
            "name": "gemcitabine_tandem",
            "drug_name": "Gemcitabine",
            "response_type": "AUC",
            "response_transform": "log",
            "feature_transform": "pca",
            "strategy": "tandem",
            "folds": 3,
            "seed": 11,
            "model_params": {"tandem": {"l1_ratio": 0.7}},
        },
    }

    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_file


def test_app_config_load(sample_config_file, monkeypatch):
    monkeypatch.delenv("FORESEE_LOG_LEVEL", raising=False)
    cfg = AppConfig.load(path=str(sample_config_file))

    assert isinstance(cfg.log, LogConfig)
    assert isinstance(cfg.training, TrainingConfig)

    assert cfg.log.level == "DEBUG"
    assert cfg.training.drug_name == "Gemcitabine"
    assert cfg.training.folds == 3
    assert cfg.training.params_for("tandem") == {"l1_ratio": 0.7}
    assert cfg.training.params_for("ridge") == {}


def test_default_config_loads(monkeypatch):
    monkeypatch.delenv("FORESEE_LOG_LEVEL", raising=False)
    cfg = AppConfig.load()

    assert cfg.training.drug_name == "Docetaxel"
    assert cfg.training.strategy == "ridge"


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(path=str(tmp_path / "nope.yml"))


def test_env_overrides_log_level(sample_config_file, monkeypatch):
    monkeypatch.setenv("FORESEE_LOG_LEVEL", "WARNING")
    cfg = AppConfig.load(path=str(sample_config_file))

    assert cfg.log.level == "WARNING"


def test_zero_folds_rejected():
    with pytest.raises(ValidationError):
        TrainingConfig(drug_name="X", folds=0)
