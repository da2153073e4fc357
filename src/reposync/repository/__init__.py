"""Repository state synchronization.

This package caches git state for a presentation layer and supervises the
mutating operations that change it.

Classes:
    Repository: Cached queries and supervised operations for one working tree.
    OperationStates: Per-class in-progress flags.

Models:
    BranchState: Current branch snapshot.
    AheadBehind: Divergence from the upstream.
    AheadBehindStatus: Tracking relationship of the current branch.
    OperationKind: Operation classes serialized by OperationStates.
    OperationStatesSnapshot: Immutable copy of the in-progress flags.
    RepositoryState: Everything presentation reads in one refresh.

Example:
    >>> from reposync.repository import Repository
    >>> repository = Repository.open(Path.cwd())
    >>> state = await repository.read_state()
    >>> await repository.fetch()
"""

from reposync.repository._classify import (
    classify_checkout_error,
    classify_push_error,
    is_push_rejected,
    looks_like_merge_conflict,
    parse_overwritten_paths,
)
from reposync.repository._models import (
    SYNC_OPERATIONS,
    AheadBehind,
    AheadBehindStatus,
    BranchState,
    OperationKind,
    OperationStatesSnapshot,
    RepositoryState,
)
from reposync.repository._operations import OperationStates
from reposync.repository._repository import Repository, parse_changed_paths

__all__ = [
    "SYNC_OPERATIONS",
    "AheadBehind",
    "AheadBehindStatus",
    "BranchState",
    "OperationKind",
    "OperationStates",
    "OperationStatesSnapshot",
    "Repository",
    "RepositoryState",
    "classify_checkout_error",
    "classify_push_error",
    "is_push_rejected",
    "looks_like_merge_conflict",
    "parse_changed_paths",
    "parse_overwritten_paths",
]
