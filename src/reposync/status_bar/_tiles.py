"""Pure derivations from repository state to status bar tiles."""

from reposync.repository import (
    AheadBehind,
    AheadBehindStatus,
    BranchState,
    OperationStatesSnapshot,
)
from reposync.status_bar._models import (
    DETACHED_SENTINEL,
    BranchMenu,
    BranchOption,
    PushPullAction,
    PushPullTile,
)


def push_pull_label(
    ahead: int,
    behind: int,
    *,
    has_remote: bool,
    has_upstream: bool,
    is_detached: bool,
) -> tuple[str, PushPullAction]:
    """Return the push/pull tile label and click action.

    Args:
        ahead: Local commits not on the upstream.
        behind: Upstream commits not on the local branch.
        has_remote: At least one remote is configured.
        has_upstream: The current branch tracks an upstream.
        is_detached: HEAD is detached.

    Returns:
        A ``(label, action)`` pair.
    """
    if is_detached:
        return "Not on branch", PushPullAction.NONE
    if not has_remote:
        return "No remote", PushPullAction.NONE
    if not has_upstream:
        return "Publish", PushPullAction.PUBLISH
    if behind > 0:
        label = f"{ahead} Pull {behind}" if ahead > 0 else f"Pull {behind}"
        return label, PushPullAction.PULL
    if ahead > 0:
        return f"Push {ahead}", PushPullAction.PUSH
    return "Fetch", PushPullAction.FETCH


def compute_push_pull_tile(
    ahead_behind: AheadBehind,
    operation_states: OperationStatesSnapshot | None = None,
) -> PushPullTile:
    """Derive the push/pull tile from a divergence snapshot.

    An unknown status (absent repository) yields an empty, inert tile.
    """
    busy = operation_states.any_sync_in_progress() if operation_states else False
    if ahead_behind.status is AheadBehindStatus.UNKNOWN:
        return PushPullTile("", PushPullAction.NONE, busy=busy)
    label, action = push_pull_label(
        ahead_behind.ahead,
        ahead_behind.behind,
        has_remote=ahead_behind.has_remote,
        has_upstream=ahead_behind.has_upstream,
        is_detached=ahead_behind.status is AheadBehindStatus.DETACHED,
    )
    return PushPullTile(label, action, busy=busy)


def changed_files_label(count: int) -> str:
    """Return ``"1 file"`` or ``"N files"``."""
    return "1 file" if count == 1 else f"{count} files"


def build_branch_menu(
    branch: BranchState | None,
    branches: tuple[str, ...],
    *,
    checkout_in_progress: bool = False,
    pending: str | None = None,
) -> BranchMenu:
    """Build the branch menu.

    Branches are listed alphabetically. A detached HEAD adds a disabled
    entry labelled with its describe name, valued DETACHED_SENTINEL, and
    selected. While a checkout runs, the requested branch is shown as
    selected and the menu is disabled.

    Args:
        branch: Current branch, or None when absent.
        branches: Local branch names.
        checkout_in_progress: A checkout is running.
        pending: Branch the running checkout targets.
    """
    options = [BranchOption(name, name) for name in sorted(branches)]
    selected: str | None = None
    if branch is not None:
        if branch.is_detached:
            options.append(BranchOption(branch.name, DETACHED_SENTINEL, disabled=True))
            selected = DETACHED_SENTINEL
        else:
            selected = branch.name
    if checkout_in_progress and pending is not None:
        selected = pending
    return BranchMenu(tuple(options), selected, disabled=checkout_in_progress)
