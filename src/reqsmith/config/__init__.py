"""ReqSmith configuration.

This module provides the public API for ReqSmith configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from reqsmith.config import Config
    >>> config = Config.load()
    >>> config.document.cascade_deletes
    False
"""

from reqsmith.exceptions import ConfigError, ConfigLoadError

from ._defaults import DEFAULT_CONFIG
from ._loader import copy_value, deep_merge, parse_env_vars, read_toml_file, set_nested_key
from ._models import (
    CodecConfig,
    Config,
    DocumentConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

__all__ = [
    "DEFAULT_CONFIG",
    "CodecConfig",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "DocumentConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "read_toml_file",
    "set_nested_key",
]
