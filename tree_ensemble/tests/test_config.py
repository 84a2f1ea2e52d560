"""
Tests for the configuration loading and validation logic.
"""

import pytest
import yaml
from copy import deepcopy

from tree_ensemble.core.config import ConfigError, load_settings, Settings

# A minimal, valid config dictionary for creating test YAML files
VALID_CONFIG_DICT = {
    "model": {
        "path": "models/iris_xgboost_dump.json",
        "feature_map_path": "",
        "num_classes": 3,
        "max_depth": 4,
        "load_transformation": False,
    },
    "logging": {"level": "DEBUG"},
}


def _write(tmp_path, config, name="settings.yaml"):
    config_file = tmp_path / name
    with open(config_file, "w") as f:
        yaml.dump(config, f)
    return str(config_file)


def test_load_settings_success(tmp_path):
    """
    Tests that a valid YAML file is loaded correctly into a Settings object.
    """
    settings = load_settings(path=_write(tmp_path, VALID_CONFIG_DICT))

    assert isinstance(settings, Settings)
    assert settings.model.path == "models/iris_xgboost_dump.json"
    assert settings.model.num_classes == 3
    assert settings.model.max_depth == 4
    assert settings.logging.level == "DEBUG"


def test_defaults_for_optional_keys(tmp_path):
    settings = load_settings(path=_write(tmp_path, {"model": {"path": "m.json", "feature_map_path": None}}))

    assert settings.model.feature_map_path == ""
    assert settings.model.num_classes == 1
    assert settings.model.max_depth == 0
    assert settings.model.load_transformation is False
    assert settings.logging is None


def test_load_settings_file_not_found():
    """
    Tests that a ConfigError is raised if the settings file does not exist.
    """
    with pytest.raises(ConfigError, match="Configuration file not found"):
        load_settings(path="non_existent_file.yaml")


def test_empty_yaml(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")

    with pytest.raises(ConfigError, match="empty or invalid"):
        load_settings(path=str(config_file))


def test_unparseable_yaml(tmp_path):
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("model: [unclosed\n")

    with pytest.raises(ConfigError, match="Error parsing YAML"):
        load_settings(path=str(config_file))


def test_config_validation_error_missing_key(tmp_path):
    """
    Tests that a ConfigError is raised if a required key is missing.
    """
    invalid_config = deepcopy(VALID_CONFIG_DICT)
    del invalid_config["model"]["path"]

    with pytest.raises(ConfigError, match="Failed to validate settings"):
        load_settings(path=_write(tmp_path, invalid_config, "invalid.yaml"))


def test_config_validation_error_wrong_type(tmp_path):
    """
    Tests that a ConfigError is raised if a value has the wrong type.
    """
    invalid_config = deepcopy(VALID_CONFIG_DICT)
    invalid_config["model"]["max_depth"] = "deep"

    with pytest.raises(ConfigError, match="Failed to validate settings"):
        load_settings(path=_write(tmp_path, invalid_config, "invalid.yaml"))


def test_env_override(tmp_path, monkeypatch):
    """
    Tests that environment variables correctly override YAML settings.
    """
    config_file = _write(tmp_path, VALID_CONFIG_DICT)

    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__MAX_DEPTH", "0")
    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__NUM_CLASSES", "2")
    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__LOAD_TRANSFORMATION", "true")
    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__FEATURE_MAP_PATH", "123")
    monkeypatch.setenv("TREE_ENSEMBLE_LOGGING__LEVEL", "WARNING")

    settings = load_settings(path=config_file)

    assert settings.model.max_depth == 0
    assert settings.model.num_classes == 2
    assert settings.model.load_transformation is True
    # paths stay strings
    assert settings.model.feature_map_path == "123"
    assert settings.logging.level == "WARNING"
    # untouched keys keep the file value
    assert settings.model.path == "models/iris_xgboost_dump.json"


def test_env_override_negative_number(tmp_path, monkeypatch):
    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__MAX_DEPTH", "-1")

    settings = load_settings(path=_write(tmp_path, VALID_CONFIG_DICT))

    # range checks are left to the loader
    assert settings.model.max_depth == -1


def test_env_override_path_that_looks_like_a_bool(tmp_path, monkeypatch):
    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__PATH", "true")
    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__NUM_CLASSES", "three")

    with pytest.raises(ConfigError, match="Failed to validate settings"):
        load_settings(path=_write(tmp_path, VALID_CONFIG_DICT))

    monkeypatch.setenv("TREE_ENSEMBLE_MODEL__NUM_CLASSES", "3")
    settings = load_settings(path=_write(tmp_path, VALID_CONFIG_DICT))

    assert settings.model.path == "true"
    assert settings.model.num_classes == 3
