"""Platform-specific paths used by reposync."""

from pathlib import Path

import platformdirs

APP_NAME = "reposync"


def get_log_dir() -> Path:
    """Get the per-user log directory for reposync."""
    return platformdirs.user_log_path(APP_NAME)


def get_cli_log_file() -> Path:
    """Get the path to the CLI log file inside the log directory."""
    return get_log_dir() / "cli.log"


def get_user_config_dir() -> Path:
    """Get the per-user configuration directory for reposync."""
    return platformdirs.user_config_path(APP_NAME)
