"""Git backend protocol for type-safe dependency injection.

This module defines the single capability the synchronization engine needs
from git: run a command and either return its output or raise a tagged
error. Both the subprocess backend and the scripted fake satisfy it.
"""

from collections.abc import Sequence  # noqa: TC003
from pathlib import Path  # noqa: TC003
from typing import Protocol, runtime_checkable

from reposync.backend._models import GitResult  # noqa: TC001


@runtime_checkable
class GitBackend(Protocol):
    """Protocol for executing git commands against one working tree.

    Example:
        >>> async def current_branch(backend: GitBackend) -> str:
        ...     result = await backend.execute(["symbolic-ref", "--short", "HEAD"])
        ...     return result.stdout.strip()
    """

    @property
    def root(self) -> Path:
        """Working-tree directory the backend operates on."""
        ...

    async def execute(self, argv: Sequence[str]) -> GitResult:
        """Run git with the given arguments.

        Args:
            argv: Arguments after the git executable, e.g. ``["fetch", "origin"]``.

        Returns:
            GitResult with the captured output.

        Raises:
            GitCommandError: If git exits with a non-zero status. The error
                carries the exit code and raw output for classification.
        """
        ...
