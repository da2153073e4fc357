"""reposync exceptions."""

from collections.abc import Sequence  # noqa: TC003
from enum import StrEnum
from pathlib import Path  # noqa: TC003
from typing import Any, Literal


class ReposyncError(Exception):
    """Base exception for reposync errors."""


class ConfigError(ReposyncError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Backend Exceptions
# =============================================================================


class GitCommandError(ReposyncError):
    """Raised when a git invocation exits with a non-zero status.

    Carries the raw output so that callers can classify the failure.

    Attributes:
        argv: The git arguments (without the executable).
        exit_code: Process exit code.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Initialize with the failed invocation and its output.

        Args:
            message: Human-readable error message.
            argv: The git arguments (without the executable).
            exit_code: Process exit code.
            stdout: Captured standard output.
            stderr: Captured standard error.
        """
        super().__init__(message)
        self.argv: tuple[str, ...] = tuple(argv)
        self.exit_code: int = exit_code
        self.stdout: str = stdout
        self.stderr: str = stderr

    @property
    def output(self) -> str:
        """Return stderr and stdout joined, for pattern matching."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


class GitNotFoundError(ReposyncError):
    """Raised when the git executable cannot be started."""

    def __init__(self, message: str, *, executable: str) -> None:
        """Initialize with error message and the executable that was tried."""
        super().__init__(message)
        self.executable: str = executable


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(ReposyncError):
    """Base exception for repository synchronization errors."""


class NoRemoteError(RepositoryError):
    """Raised when an operation needs a remote and none is configured.

    Attributes:
        branch: The branch the operation targeted.
    """

    def __init__(self, message: str, *, branch: str | None = None) -> None:
        """Initialize with error message and branch context."""
        super().__init__(message)
        self.branch: str | None = branch


class OperationInProgressError(RepositoryError):
    """Raised when tracking starts for an operation class that is already busy.

    Attributes:
        operation: The operation class name, e.g. ``"push"``.
    """

    def __init__(self, message: str, *, operation: str) -> None:
        """Initialize with error message and the busy operation class."""
        super().__init__(message)
        self.operation: str = operation


class ErrorKind(StrEnum):
    """Closed taxonomy of backend failure categories."""

    CHECKOUT_CONFLICT = "checkout-conflict"
    BRANCH_EXISTS = "branch-exists"
    PUSH_REJECTED = "push-rejected"
    MERGE_CONFLICT = "merge-conflict"
    UNCLASSIFIED = "unclassified"


type NotificationLevel = Literal["error", "warning"]


class SyncOperationError(RepositoryError):
    """Base class for classified backend failures.

    Every subclass carries a short title and a longer description suitable
    for a notification surface.

    Attributes:
        kind: The taxonomy entry for this failure.
        level: Notification severity.
        title: Short notification title.
        description: Longer, user-actionable description.
        cause: The raw backend failure, when there was one.
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED
    level: NotificationLevel = "error"
    title: str = ""

    def __init__(
        self,
        description: str,
        *,
        cause: GitCommandError | None = None,
    ) -> None:
        """Initialize with description and the originating backend error.

        Args:
            description: Longer, user-actionable description.
            cause: The raw backend failure, when there was one.
        """
        super().__init__(f"{self.title}: {description}")
        self.description: str = description
        self.cause: GitCommandError | None = cause


class CheckoutConflictError(SyncOperationError):
    """Checkout would overwrite local changes.

    Attributes:
        paths: Repository-relative paths that would be overwritten.
    """

    kind = ErrorKind.CHECKOUT_CONFLICT
    title = "Checkout aborted"

    def __init__(
        self,
        paths: Sequence[str],
        *,
        cause: GitCommandError | None = None,
    ) -> None:
        """Initialize with the conflicting paths."""
        self.paths: tuple[str, ...] = tuple(paths)
        lines = [
            "Local changes to the following would be overwritten:",
            *self.paths,
            "Please commit your changes or stash them.",
        ]
        super().__init__("\n".join(lines), cause=cause)


class BranchExistsError(SyncOperationError):
    """A branch with the requested name already exists.

    Attributes:
        branch: The name that was taken.
    """

    kind = ErrorKind.BRANCH_EXISTS
    title = "Cannot create branch"

    def __init__(self, branch: str, *, cause: GitCommandError | None = None) -> None:
        """Initialize with the branch name that is already taken."""
        self.branch: str = branch
        super().__init__(
            f'"{branch}" already exists. Choose another branch name.', cause=cause
        )


class PushRejectedError(SyncOperationError):
    """The remote refused a non-fast-forward push."""

    kind = ErrorKind.PUSH_REJECTED
    title = "Push rejected"

    def __init__(self, *, cause: GitCommandError | None = None) -> None:
        """Initialize with the originating backend error."""
        super().__init__(
            "The tip of your current branch is behind its remote counterpart. "
            "Try pulling before pushing again.",
            cause=cause,
        )


class MergeConflictError(SyncOperationError):
    """Pull left unresolved conflicts; the repository is mid-merge."""

    kind = ErrorKind.MERGE_CONFLICT
    level = "warning"
    title = "Merge conflicts"

    def __init__(self, *, cause: GitCommandError | None = None) -> None:
        """Initialize with the originating backend error."""
        super().__init__(
            "Your local changes conflicted with changes made on the remote branch. "
            "Resolve the conflicts and commit the merge.",
            cause=cause,
        )


# =============================================================================
# Command Exceptions
# =============================================================================


class UnknownCommandError(ReposyncError):
    """Raised when dispatching a command name that was never registered."""

    def __init__(self, name: str) -> None:
        """Initialize with the unknown command name."""
        super().__init__(f"Unknown command: {name}")
        self.name: str = name
