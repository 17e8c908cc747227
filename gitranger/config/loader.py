# GitRanger Configuration Loader
# Load and validate ranger.yaml files

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from gitranger.config.defaults import CONFIG_FILENAME
from gitranger.config.schema import RangerConfig
from gitranger.errors import ConfigError


def get_config_path(directory: Optional[Path] = None) -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("GIT_RANGER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return (directory or Path.cwd()) / CONFIG_FILENAME


def _read_yaml(config_path: Path) -> dict[str, Any]:
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _format_validation_error(error: ValidationError) -> list[str]:
    messages = []
    for item in error.errors():
        loc = " -> ".join(str(part) for part in item["loc"])
        messages.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return messages


def load_config(config_path: Optional[Path] = None) -> RangerConfig:
    """
    Load configuration from YAML file.

    Secrets are not resolved here; a config that references unset
    environment variables still loads.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        RangerConfig: Validated configuration anchored at the file's directory.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If the file is not valid YAML or fails validation.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\nRun 'git-ranger init' to create one."
        )

    try:
        data = _read_yaml(config_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e

    data["base_dir"] = config_path.resolve().parent

    try:
        return RangerConfig.model_validate(data)
    except ValidationError as e:
        details = "\n".join(f"  {msg}" for msg in _format_validation_error(e))
        raise ConfigError(f"Invalid configuration in {config_path}:\n{details}") from e


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without raising.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        data = _read_yaml(config_path)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]
    except ConfigError as e:
        return False, [str(e)]

    try:
        RangerConfig.model_validate(data)
    except ValidationError as e:
        return False, _format_validation_error(e)

    return True, []
