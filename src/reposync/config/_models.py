# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Configuration models.

Frozen pydantic models for each configuration section, plus the source
metadata used while merging layered configuration.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names, highest precedence first."""

    CLI = "cli"
    ENV = "env"
    WORKTREE = "worktree"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A configuration source.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for CLI, ENV and DEFAULT.
        exists: Whether the source exists (file exists, or values are present).
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]  # pyright: ignore[reportExplicitAny]


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty uses the per-user CLI log file).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class SyncConfig(BaseModel):
    """Synchronization configuration section.

    Attributes:
        default_remote: Remote used to publish branches without an upstream.
        git_executable: Name or path of the git binary.
        prune_on_fetch: Remove remote-tracking refs that no longer exist.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    default_remote: str = Field(default="origin", min_length=1)
    git_executable: str = Field(default="git", min_length=1)
    prune_on_fetch: bool = False
