import os
import sys
from pathlib import Path  # noqa: TC003

from reposync.exceptions import ConfigError

from ._config import Config


def _handle_failure(message: str, *, strict: bool) -> tuple[Config, str]:
    if strict:
        print(f"Error: {message}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Warning: Failed to load config: {message}", file=sys.stderr)  # noqa: T201
    return Config.from_dict({}), message


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Behavior on failure follows REPOSYNC_STRICT_CONFIG:
    - unset or "0": warn to stderr and return the default config
    - "1": fail fast with sys.exit(1)

    An explicit config_path must exist regardless of strictness.

    Args:
        config_path: Explicit path to a config file (--config flag).
        project_root: Project root override (--repo flag).
        cli_overrides: CLI argument overrides passed to Config.load().

    Returns:
        Tuple of (Config, error_message). error_message is None on success.
    """
    strict_mode = os.environ.get("REPOSYNC_STRICT_CONFIG", "0") == "1"

    if config_path is not None and not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    try:
        if config_path is not None:
            return Config.from_file(config_path), None
        config = Config.load(
            project_root=project_root,
            include_env=True,
            include_cli=cli_overrides is not None,
            cli_overrides=cli_overrides,
        )
    except ConfigError as e:
        return _handle_failure(str(e), strict=strict_mode)
    except OSError as e:
        return _handle_failure(str(e), strict=strict_mode)
    else:
        return config, None
