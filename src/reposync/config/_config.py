# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration container with typed access."""

from pathlib import Path  # noqa: TC003
from typing import Any, ClassVar, Self, overload

import tomli_w
from pydantic import BaseModel, ConfigDict, PrivateAttr

from ._defaults import DEFAULT_CONFIG
from ._loader import copy_value, deep_merge, parse_env_vars, read_toml_file
from ._models import ConfigSource, ConfigSourceName, LoggingConfig, SyncConfig
from ._validation import raise_if_validation_errors, validate_config


class Config(BaseModel):
    """Merged, validated configuration.

    Instances are immutable. Use from_dict(), from_file() or load() rather
    than the constructor.

    Example:
        >>> config = Config.from_dict({"sync": {"default_remote": "upstream"}})
        >>> config.sync.default_remote
        'upstream'
        >>> config.get("logging.level")
        'info'
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _sync: SyncConfig = PrivateAttr(default_factory=SyncConfig)

    def __init__(
        self,
        *,
        _data: dict[str, Any] | None = None,
        _sources: tuple[ConfigSource, ...] = (),
    ) -> None:
        """Initialize from an already merged and validated dictionary.

        Args:
            _data: The complete merged configuration dictionary.
            _sources: Sources that contributed to this configuration.
        """
        super().__init__()
        self._data = _data if _data is not None else copy_value(DEFAULT_CONFIG)
        self._sources = _sources
        self._logging = LoggingConfig.model_validate(self._data.get("logging", {}))
        self._sync = SyncConfig.model_validate(self._data.get("sync", {}))

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, validate: bool = True) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If validation fails (when validate=True).
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        if validate:
            raise_if_validation_errors(validate_config(merged))
        return cls(_data=merged)

    @classmethod
    def from_file(cls, path: Path, *, validate: bool = True) -> Self:
        """Load configuration from a single file merged over the defaults.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        data = read_toml_file(path)
        source = ConfigSource(
            name=ConfigSourceName.PROJECT,
            path=path,
            exists=True,
            values=data,
        )
        merged = deep_merge(DEFAULT_CONFIG, data)
        if validate:
            raise_if_validation_errors(validate_config(merged), source=str(path))
        return cls(_data=merged, _sources=(source,))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
        include_cli: bool = False,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all discovered sources.

        Sources merge lowest precedence first: defaults, user, project,
        worktree, env, cli.

        Args:
            project_root: Project root. Auto-detected if None.
            include_env: Include ``REPOSYNC_<SECTION>__<KEY>`` variables.
            include_cli: Include CLI overrides.
            cli_overrides: CLI overrides, used only if include_cli is True.

        Raises:
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        from ._discovery import discover_sources  # noqa: PLC0415

        sources = discover_sources(
            project_root=project_root,
            include_env=include_env,
            include_cli=include_cli,
            cli_overrides=cli_overrides,
        )

        merged: dict[str, Any] = {}
        loaded_sources: list[ConfigSource] = []

        for source in reversed(sources):
            values: dict[str, Any] = {}
            match source.name:
                case ConfigSourceName.DEFAULT | ConfigSourceName.CLI:
                    values = source.values
                case ConfigSourceName.ENV:
                    values = parse_env_vars()
                case _ if source.path is not None and source.exists:
                    values = read_toml_file(source.path)
                case _:
                    pass

            loaded_sources.append(
                ConfigSource(
                    name=source.name,
                    path=source.path,
                    exists=source.exists,
                    values=values,
                )
            )
            if values:
                merged = deep_merge(merged, values)

        raise_if_validation_errors(validate_config(merged))

        return cls(_data=merged, _sources=tuple(reversed(loaded_sources)))

    @property
    def sources(self) -> list[ConfigSource]:
        """Return contributing sources, highest precedence first."""
        return list(self._sources)

    @property
    def logging(self) -> LoggingConfig:
        """Return the logging configuration section."""
        return self._logging

    @property
    def sync(self) -> SyncConfig:
        """Return the sync configuration section."""
        return self._sync

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get[T](self, key: str, default: T) -> Any | T: ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Examples:
            >>> config.get("sync.default_remote")
            'origin'
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def to_dict(self, *, include_defaults: bool = True) -> dict[str, Any]:
        """Convert configuration to a dictionary.

        Args:
            include_defaults: If False, only values that differ from the
                defaults are included.
        """
        if include_defaults:
            return copy_value(self._data)
        return _diff_from_defaults(self._data, DEFAULT_CONFIG)

    def to_toml(self, *, include_defaults: bool = False) -> str:
        """Convert configuration to a TOML string."""
        return tomli_w.dumps(self.to_dict(include_defaults=include_defaults))


def _diff_from_defaults(
    data: dict[str, Any],
    defaults: dict[str, Any],
) -> dict[str, Any]:
    result: dict[str, Any] = {}

    for key, value in data.items():
        if key not in defaults:
            result[key] = copy_value(value)
        elif isinstance(value, dict) and isinstance(defaults[key], dict):
            nested_diff = _diff_from_defaults(value, defaults[key])
            if nested_diff:
                result[key] = nested_diff
        elif value != defaults[key]:
            result[key] = copy_value(value)

    return result
