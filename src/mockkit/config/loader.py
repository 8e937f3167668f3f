"""
Settings loader for mockkit.

Handles loading settings from YAML files and the MOCKKIT_CONFIG environment
variable.
"""

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import MockSettings

CONFIG_ENV_VAR = "MOCKKIT_CONFIG"


class SettingsError(Exception):
    """Raised when a settings file is missing or invalid."""

    pass


def load_settings_from_yaml(config_path: Path) -> MockSettings:
    """Load settings from a YAML file."""
    if not config_path.exists():
        raise SettingsError(f"Settings file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in settings file: {e}")

    if raw_config is None:
        raise SettingsError("Settings file is empty")

    # Accept either a bare mapping or one nested under a 'mockkit' key
    if isinstance(raw_config, dict) and "mockkit" in raw_config:
        raw_config = raw_config["mockkit"]

    if not isinstance(raw_config, dict):
        raise SettingsError("Settings file must contain a mapping")

    try:
        return MockSettings(**raw_config)
    except ValidationError as e:
        raise SettingsError(f"Settings validation failed:\n{e}")


def load_settings(config_path: Path | None = None) -> MockSettings:
    """
    Resolve settings.

    An explicit path wins, then the MOCKKIT_CONFIG environment variable,
    then the built-in defaults.
    """
    if config_path is not None:
        return load_settings_from_yaml(config_path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return load_settings_from_yaml(Path(env_path))

    return MockSettings()


def generate_default_settings(output_path: Path) -> None:
    """Write a settings file holding the defaults."""
    default_config = {"mockkit": MockSettings().model_dump()}

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
