"""Translation of raw git failures into the classified error taxonomy.

Structured signals (exit codes, porcelain flags) are checked by the caller
first; the text patterns here are the fallback for output git only reports
in prose.
"""

import re
from typing import Final

from reposync.exceptions import (
    BranchExistsError,
    CheckoutConflictError,
    GitCommandError,
    PushRejectedError,
    SyncOperationError,
)

_OVERWRITTEN_HEADER: Final = re.compile(
    r"following (?:untracked working tree )?files would be overwritten by checkout:"
)
_BRANCH_EXISTS: Final = re.compile(r"branch named '(?P<name>[^']+)' already exists")
_PUSH_REJECTED: Final = re.compile(
    r"\[rejected\]|\[remote rejected\]|non-fast-forward|Updates were rejected"
)
_MERGE_CONFLICT: Final = re.compile(r"^CONFLICT \(|Automatic merge failed", re.MULTILINE)


def parse_overwritten_paths(output: str) -> tuple[str, ...]:
    """Extract the paths git lists under an overwritten-by-checkout header.

    Git prints each path on its own tab-indented line below the header. The
    untracked-files and modified-files sections are both collected.

    Args:
        output: Combined stderr/stdout from a failed checkout.

    Returns:
        Paths in the order git reported them, without duplicates.
    """
    paths: list[str] = []
    collecting = False
    for line in output.splitlines():
        if _OVERWRITTEN_HEADER.search(line):
            collecting = True
            continue
        if collecting and line.startswith("\t"):
            path = line.strip()
            if path and path not in paths:
                paths.append(path)
            continue
        collecting = False
    return tuple(paths)


def classify_checkout_error(
    error: GitCommandError, branch: str
) -> SyncOperationError | None:
    """Classify a failed checkout.

    Args:
        error: The raw backend failure.
        branch: Branch that was being checked out or created.

    Returns:
        CheckoutConflictError or BranchExistsError, or None if the failure
        is not recognised.
    """
    output = error.output
    if _OVERWRITTEN_HEADER.search(output):
        return CheckoutConflictError(parse_overwritten_paths(output), cause=error)
    match = _BRANCH_EXISTS.search(output)
    if match is not None:
        return BranchExistsError(match.group("name") or branch, cause=error)
    return None


def is_push_rejected(error: GitCommandError) -> bool:
    """Return True if a failed push was refused by the remote.

    ``push --porcelain`` flags a rejected ref with a leading ``!`` on stdout.
    Prose on stderr is checked when no porcelain line is present.
    """
    for line in error.stdout.splitlines():
        if line.startswith("!"):
            return True
    return _PUSH_REJECTED.search(error.output) is not None


def classify_push_error(error: GitCommandError) -> PushRejectedError | None:
    """Classify a failed push, returning None if not recognised."""
    if is_push_rejected(error):
        return PushRejectedError(cause=error)
    return None


def looks_like_merge_conflict(error: GitCommandError) -> bool:
    """Return True if a failed pull's output reports merge conflicts."""
    return _MERGE_CONFLICT.search(error.output) is not None
