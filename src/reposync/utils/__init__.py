"""Shared utilities: logging, platform paths and repository discovery."""

from reposync.utils._git import (
    decode_bytes,
    discover_repo,
    find_worktree_root,
    get_worktree_dir,
)
from reposync.utils._logging import (
    LogFormatType,
    create_cli_logger,
    create_file_logger,
)
from reposync.utils._paths import get_cli_log_file, get_log_dir, get_user_config_dir

__all__ = [
    "LogFormatType",
    "create_cli_logger",
    "create_file_logger",
    "decode_bytes",
    "discover_repo",
    "find_worktree_root",
    "get_cli_log_file",
    "get_log_dir",
    "get_user_config_dir",
    "get_worktree_dir",
]
