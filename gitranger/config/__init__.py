# GitRanger Configuration Module
# YAML loading, validation, secrets and the init template

from gitranger.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG_TEMPLATE, write_default_config
from gitranger.config.loader import get_config_path, load_config, validate_config_file
from gitranger.config.schema import (
    CloneProtocol,
    GroupSpec,
    ProviderConfig,
    ProviderKind,
    RangerConfig,
    RepoSpec,
    WorkspaceSettings,
)
from gitranger.config.secrets import SecretString, resolve

__all__ = [
    # Schema
    "RangerConfig",
    "WorkspaceSettings",
    "ProviderConfig",
    "ProviderKind",
    "CloneProtocol",
    "GroupSpec",
    "RepoSpec",
    # Secrets
    "SecretString",
    "resolve",
    # Loader
    "load_config",
    "get_config_path",
    "validate_config_file",
    # Defaults
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "write_default_config",
]
