# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models.

This module provides the Pydantic models for ReqSmith settings and the
Config container that loads and merges them from defaults, an optional TOML
file, and environment variables.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reqsmith.config._defaults import DEFAULT_CONFIG
from reqsmith.config._loader import deep_merge, parse_env_vars, read_toml_file
from reqsmith.exceptions import ConfigLoadError


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.JSON
    file: str = ""


class CodecConfig(BaseModel):
    """Interchange codec settings."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    indent: bool = Field(
        default=True, description="Indent JSON output by two spaces."
    )
    trailing_newline: bool = Field(
        default=True, description="End written documents with a newline."
    )


class DocumentConfig(BaseModel):
    """Document aggregate settings."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    cascade_deletes: bool = Field(
        default=False,
        description=(
            "Remove relations and hierarchy nodes that point at a removed "
            "spec object instead of refusing the removal."
        ),
    )


class Config(BaseModel):
    """Top-level ReqSmith configuration.

    Example:
        >>> config = Config.load()
        >>> config.logging.level
        <LogLevel.WARNING: 'warning'>
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    document: DocumentConfig = Field(default_factory=DocumentConfig)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        path: Path | None = None,
    ) -> Self:
        """Build a configuration from a dictionary merged over the defaults.

        Args:
            data: Configuration values. Unknown keys are ignored.
            path: File the values came from, for error context.

        Returns:
            The validated configuration.

        Raises:
            ConfigLoadError: If a value fails validation.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigLoadError(msg, path=path) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a TOML file.

        Args:
            path: Path to the TOML file.

        Returns:
            The validated configuration.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed or validated.
        """
        return cls.from_dict(read_toml_file(path), path=path)

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        include_env: bool = True,
    ) -> Self:
        """Load configuration from defaults, a TOML file, and the environment.

        Precedence, highest first: environment variables, the TOML file,
        built-in defaults.

        Args:
            path: Optional TOML file. Skipped when None or missing.
            include_env: Whether to apply REQSMITH_* environment variables.

        Returns:
            The validated configuration.

        Raises:
            ConfigLoadError: If a source cannot be parsed or validated.
        """
        data: dict[str, Any] = {}
        if path is not None and path.exists():
            data = read_toml_file(path)
        if include_env:
            data = deep_merge(data, parse_env_vars())
        return cls.from_dict(data, path=path)
