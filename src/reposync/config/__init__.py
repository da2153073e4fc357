"""reposync configuration.

Layered TOML configuration with typed, validated access.

Example:
    >>> from reposync.config import Config
    >>> config = Config.load()
    >>> config.sync.default_remote
    'origin'
"""

from reposync.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._config import Config
from ._defaults import DEFAULT_CONFIG
from ._discovery import (
    PROJECT_CONFIG_NAME,
    WORKTREE_CONFIG_NAME,
    discover_sources,
    find_project_root,
    get_git_dir,
    get_user_config_path,
)
from ._load import safe_load_config
from ._loader import (
    ENV_PREFIX,
    copy_value,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SyncConfig,
)
from ._validation import (
    ValidationIssue,
    raise_if_validation_errors,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "PROJECT_CONFIG_NAME",
    "WORKTREE_CONFIG_NAME",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SyncConfig",
    "ValidationIssue",
    "copy_value",
    "deep_merge",
    "discover_sources",
    "find_project_root",
    "get_git_dir",
    "get_user_config_path",
    "parse_env_vars",
    "parse_string_value",
    "raise_if_validation_errors",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
    "validate_config",
]
