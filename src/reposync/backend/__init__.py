"""Git backends.

This package defines the narrow interface the synchronization engine uses to
talk to git, plus two implementations.

Classes:
    GitBackend: Runtime-checkable protocol for dependency injection.
    GitCliBackend: Runs the git executable through anyio subprocesses.
    FakeGitBackend: In-memory, call-recording backend for tests.

Models:
    GitResult: Output of a successful git invocation.

Example:
    >>> from reposync.backend import GitCliBackend
    >>> backend = GitCliBackend(Path("/path/to/worktree"))
    >>> result = await backend.execute(["rev-parse", "HEAD"])
"""

from reposync.backend._cli import GitCliBackend
from reposync.backend._fake import FakeGitBackend
from reposync.backend._models import GitResult
from reposync.backend._protocol import GitBackend

__all__ = [
    "FakeGitBackend",
    "GitBackend",
    "GitCliBackend",
    "GitResult",
]
