"""Repository state models.

This module defines the immutable snapshots the synchronization engine hands
to presentation code. Snapshots are superseded wholesale, never mutated.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Self


@dataclass(frozen=True, slots=True)
class BranchState:
    """Current branch snapshot.

    Attributes:
        name: Branch name, or a describe-style name (e.g. ``master~2``) when
            HEAD is detached.
        is_detached: True when HEAD does not point at a local branch.
    """

    name: str
    is_detached: bool = False


class AheadBehindStatus(StrEnum):
    """Relationship between the current branch and its upstream."""

    TRACKING = "tracking"
    NO_REMOTE = "no-remote"
    NO_UPSTREAM = "no-upstream"
    DETACHED = "detached"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class AheadBehind:
    """Divergence of the current branch from its upstream.

    Counts are only meaningful when status is TRACKING.

    Attributes:
        status: Tracking relationship.
        ahead: Local commits not on the upstream.
        behind: Upstream commits not on the local branch.
        upstream: Upstream ref short name, e.g. ``origin/master``.
    """

    status: AheadBehindStatus
    ahead: int = 0
    behind: int = 0
    upstream: str | None = None

    @classmethod
    def tracking(cls, ahead: int, behind: int, upstream: str | None = None) -> Self:
        """Create a snapshot for a branch with an upstream."""
        return cls(AheadBehindStatus.TRACKING, ahead, behind, upstream)

    @classmethod
    def no_remote(cls) -> Self:
        """Create a snapshot for a repository without remotes."""
        return cls(AheadBehindStatus.NO_REMOTE)

    @classmethod
    def no_upstream(cls) -> Self:
        """Create a snapshot for a branch that has not been published."""
        return cls(AheadBehindStatus.NO_UPSTREAM)

    @classmethod
    def detached(cls) -> Self:
        """Create a snapshot for a detached HEAD."""
        return cls(AheadBehindStatus.DETACHED)

    @classmethod
    def unknown(cls) -> Self:
        """Create a snapshot for an absent repository."""
        return cls(AheadBehindStatus.UNKNOWN)

    @property
    def has_remote(self) -> bool:
        """Return True unless the repository has no remote configured."""
        return self.status not in {AheadBehindStatus.NO_REMOTE, AheadBehindStatus.UNKNOWN}

    @property
    def has_upstream(self) -> bool:
        """Return True if the branch tracks an upstream."""
        return self.status is AheadBehindStatus.TRACKING


class OperationKind(StrEnum):
    """Mutating operation classes, each serialized independently."""

    PUSH = "push"
    PULL = "pull"
    FETCH = "fetch"
    CHECKOUT = "checkout"


SYNC_OPERATIONS: frozenset[OperationKind] = frozenset(
    {OperationKind.PUSH, OperationKind.PULL, OperationKind.FETCH}
)


@dataclass(frozen=True, slots=True)
class OperationStatesSnapshot:
    """Point-in-time copy of the in-progress flags.

    Attributes:
        push: Push in progress.
        pull: Pull in progress.
        fetch: Fetch in progress.
        checkout: Checkout in progress.
    """

    push: bool = False
    pull: bool = False
    fetch: bool = False
    checkout: bool = False

    def is_in_progress(self, kind: OperationKind) -> bool:
        """Return the flag for the given operation class."""
        return bool(getattr(self, kind.value))

    def any_sync_in_progress(self) -> bool:
        """Return True if any of fetch, pull or push is in progress."""
        return self.push or self.pull or self.fetch


@dataclass(frozen=True, slots=True)
class RepositoryState:
    """Everything presentation needs from one refresh.

    Attributes:
        present: False when no working tree is associated.
        branch: Current branch, None when absent.
        ahead_behind: Divergence from upstream.
        changed_file_count: Distinct paths with uncommitted changes.
        operation_states: In-progress flags at read time.
        merge_in_progress: True while a conflicted merge awaits resolution.
        generation: Cache generation all fields were read under.
    """

    present: bool
    branch: BranchState | None
    ahead_behind: AheadBehind
    changed_file_count: int
    operation_states: OperationStatesSnapshot
    merge_in_progress: bool
    generation: int

    @classmethod
    def absent(cls, operation_states: OperationStatesSnapshot | None = None) -> Self:
        """Create the empty state reported for an absent repository."""
        return cls(
            present=False,
            branch=None,
            ahead_behind=AheadBehind.unknown(),
            changed_file_count=0,
            operation_states=operation_states or OperationStatesSnapshot(),
            merge_in_progress=False,
            generation=0,
        )
