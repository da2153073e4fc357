"""Configuration source discovery.

Locates the project root (the git working tree), the per-user config file,
and the worktree-private config file inside the git control directory.
"""

from pathlib import Path
from typing import Any

import platformdirs

from ._defaults import DEFAULT_CONFIG
from ._models import ConfigSource, ConfigSourceName

PROJECT_CONFIG_NAME = ".reposync.toml"
WORKTREE_CONFIG_NAME = "reposync.toml"


def find_project_root(start: Path | None = None) -> Path | None:
    """Find the project root by searching upward for a ``.git`` entry.

    Both ``.git`` directories and ``.git`` files (linked worktrees,
    submodules) mark a root.

    Args:
        start: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        Path to the directory containing ``.git``, or None.
    """
    current = (start or Path.cwd()).resolve()

    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def get_user_config_path() -> Path:
    r"""Get the platform-specific user config file path.

    - Linux: ``~/.config/reposync/config.toml``
    - macOS: ``~/Library/Application Support/reposync/config.toml``
    - Windows: ``%APPDATA%\reposync\config.toml``

    The path is returned whether or not it exists.
    """
    return platformdirs.user_config_path("reposync") / "config.toml"


def get_git_dir(path: Path | None = None) -> Path | None:
    """Get the git control directory for the given path.

    For linked worktrees this is the worktree-specific directory
    (``.git/worktrees/<name>/``), not the main ``.git/``.

    Args:
        path: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        Path to the git control directory, or None outside a repository.
    """
    from dulwich.errors import NotGitRepository  # noqa: PLC0415
    from dulwich.repo import Repo  # noqa: PLC0415

    search_path = str(path.resolve()) if path else "."

    try:
        repo = Repo.discover(search_path)
    except NotGitRepository:
        return None
    try:
        return Path(repo.controldir())
    finally:
        repo.close()


def _file_exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def discover_sources(
    project_root: Path | None = None,
    *,
    include_env: bool = True,
    include_cli: bool = False,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> list[ConfigSource]:
    """Discover all configuration sources, highest precedence first.

    Order: CLI, ENV, WORKTREE (``<git-dir>/reposync.toml``), PROJECT
    (``<root>/.reposync.toml``), USER, DEFAULT. File sources that do not
    exist are included with ``exists=False``. Sources that need a project
    root are omitted when none is found.

    Args:
        project_root: Project root directory. Auto-detected if None.
        include_env: Include environment variables as a source.
        include_cli: Include CLI overrides as a source.
        cli_overrides: CLI overrides, used only if include_cli is True.

    Returns:
        List of ConfigSource objects in precedence order.
    """
    sources: list[ConfigSource] = []
    resolved_root = project_root if project_root else find_project_root()

    if include_cli:
        sources.append(
            ConfigSource(
                name=ConfigSourceName.CLI,
                path=None,
                exists=bool(cli_overrides),
                values=cli_overrides or {},
            )
        )

    if include_env:
        # Values are parsed during loading
        sources.append(
            ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={})
        )

    if resolved_root:
        git_dir = get_git_dir(resolved_root)
        if git_dir:
            worktree_path = git_dir / WORKTREE_CONFIG_NAME
            sources.append(
                ConfigSource(
                    name=ConfigSourceName.WORKTREE,
                    path=worktree_path,
                    exists=_file_exists(worktree_path),
                    values={},
                )
            )

        project_path = resolved_root / PROJECT_CONFIG_NAME
        sources.append(
            ConfigSource(
                name=ConfigSourceName.PROJECT,
                path=project_path,
                exists=_file_exists(project_path),
                values={},
            )
        )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER,
            path=user_path,
            exists=_file_exists(user_path),
            values={},
        )
    )

    sources.append(
        ConfigSource(
            name=ConfigSourceName.DEFAULT,
            path=None,
            exists=True,
            values=DEFAULT_CONFIG,
        )
    )

    return sources
