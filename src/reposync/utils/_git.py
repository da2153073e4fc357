"""Git repository discovery helpers.

Discovery uses dulwich so that locating the working tree does not require
spawning git; the synchronization engine itself talks to git through a
backend.
"""

from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode()
    return value


def discover_repo(cwd: Path | str | None = None) -> Repo | None:
    """Discover the git repository containing the given directory.

    Args:
        cwd: Directory to start search from. If None, uses current directory.

    Returns:
        Repo instance if found, None otherwise.
    """
    try:
        if cwd is not None:
            return Repo.discover(str(cwd))
        return Repo.discover()
    except NotGitRepository:
        return None


def get_worktree_dir(repo: Repo) -> Path:
    """Get the working-tree directory for a repository.

    Args:
        repo: The repository instance.

    Returns:
        Path to the working-tree directory.
    """
    path = Path(decode_bytes(repo.path))
    if path.name == ".git":
        return path.parent
    return path


def find_worktree_root(cwd: Path | str | None = None) -> Path | None:
    """Return the working-tree root containing cwd, or None outside a repo."""
    repo = discover_repo(cwd)
    if repo is None:
        return None
    try:
        return get_worktree_dir(repo).resolve()
    finally:
        repo.close()

