"""
Configuration loader for the tree ensemble loader.

This module provides Pydantic models for the settings that drive a model
load and a loader function that merges a YAML configuration file with
environment variables.

- Strict Schema: every setting is declared on a Pydantic model, so wrong
  types or out-of-range values are caught before any model file is touched.
- Environment Overrides: any setting can be overridden by an environment
  variable following the nested structure, e.g. `model.max_depth` is
  overridden by `TREE_ENSEMBLE_MODEL__MAX_DEPTH`.
- Clear Errors: Pydantic `ValidationError`s are logged and wrapped in a
  `ConfigError`.

Value checks that belong to the load itself (class count > 0, depth >= 0)
are left to the loader so both entry points report the same errors.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

ENV_PREFIX = "TREE_ENSEMBLE"

# --- Custom Exceptions ---

class ConfigError(Exception):
    """Custom exception for configuration-related errors."""
    pass

# --- Pydantic Models for Configuration Sections ---

class ModelSettings(BaseModel):
    """Which dump to load and how to size its trees."""
    path: str = Field(..., min_length=1)
    feature_map_path: str = ""
    num_classes: int = 1
    max_depth: int = Field(0, description="Upper bound on tree depth; 0 means unknown.")
    load_transformation: bool = False

    @field_validator('feature_map_path', mode='before')
    def none_means_no_feature_map(cls, v):
        return "" if v is None else v

class LoggingSettings(BaseModel):
    """Settings for logging configuration."""
    level: str = Field("INFO", description="The logging level, e.g., DEBUG, INFO, WARNING.")

class Settings(BaseModel):
    """Root settings object."""
    model: ModelSettings
    logging: Optional[LoggingSettings] = None

# --- Helper Functions ---

def _load_config_from_yaml(path: Path) -> Dict[str, Any]:
    """Loads the YAML configuration file."""
    if not path.is_file():
        raise ConfigError(f"Configuration file not found at: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file at {path}: {e}") from e

def _parse_env_value(name: str, value: str) -> Any:
    """Settings only hold ints, bools and strings; paths and levels stay strings."""
    if name.endswith("path") or name == "level":
        return value
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        return value

def _get_env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """
    Parses environment variables and converts them into a nested dict.
    e.g., TREE_ENSEMBLE_MODEL__MAX_DEPTH=6 becomes {'model': {'max_depth': 6}}
    """
    overrides: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix + "_"):
            continue
        parts = key.removeprefix(prefix).strip("_").lower().split("__")
        d = overrides
        for part in parts[:-1]:
            d = d.setdefault(part, {})
        d[parts[-1]] = _parse_env_value(parts[-1], value)
    return overrides

def _merge_configs(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges the override dict into the base dict.
    """
    for key, value in overrides.items():
        if isinstance(value, dict) and key in base and isinstance(base[key], dict):
            base[key] = _merge_configs(base[key], value)
        else:
            base[key] = value
    return base

# --- Public API ---

def load_settings(path: str = "settings.yaml") -> Settings:
    """
    Loads, validates, and returns the loader settings.

    1. Loads the base configuration from the specified YAML file.
    2. Scans environment variables for overrides (prefixed with "TREE_ENSEMBLE_").
    3. Merges the environment overrides into the base configuration.
    4. Validates the final configuration against the `Settings` model.

    Raises:
        ConfigError: If the file is not found, cannot be parsed, or if
                     validation fails.
    """
    logger.info(f"Loading settings from '{path}'...")

    yaml_config = _load_config_from_yaml(Path(path))
    if not yaml_config or not isinstance(yaml_config, dict):
        raise ConfigError(f"YAML file '{path}' is empty or invalid.")

    final_config = _merge_configs(yaml_config, _get_env_overrides())

    try:
        settings = Settings.model_validate(final_config)
        logger.success("Settings loaded and validated successfully.")
        return settings
    except ValidationError as e:
        error_details = e.errors()
        error_msg = f"Configuration validation failed with {len(error_details)} error(s):\n"
        for error in error_details:
            loc = " -> ".join(map(str, error['loc'])) if error['loc'] else "root"
            error_msg += f"  - Location: {loc}\n    Message: {error['msg']}\n"

        logger.error(error_msg)
        raise ConfigError("Failed to validate settings.") from e
