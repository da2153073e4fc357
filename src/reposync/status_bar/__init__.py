"""Status bar presentation model.

Classes:
    StatusBarController: Turns presentation requests into Repository calls.
    Notifier: Protocol for showing errors and warnings.
    Confirm: Protocol for yes/no questions.
    FakeNotifier: Notifier that records notifications.
    FakeConfirm: Confirm with a fixed answer.

Models:
    StatusBarModel: Branch, push/pull and changed-files tiles.
    BranchMenu: Branch selection menu.
    BranchOption: One branch menu entry.
    NewBranchInput: Editor for a branch to create.
    PushPullTile: Push/pull tile label and action.
    PushPullAction: What clicking the push/pull tile does.

Functions:
    compute_push_pull_tile: Derive the push/pull tile from divergence.
    push_pull_label: The label table as a pure function.
    changed_files_label: ``"N file(s)"``.
    build_branch_menu: Menu from the current branch and branch list.
"""

from reposync.status_bar._controller import (
    FORCE_PUSH_DETAIL,
    FORCE_PUSH_MESSAGE,
    StatusBarController,
)
from reposync.status_bar._fake import FakeConfirm, FakeNotifier, Notification
from reposync.status_bar._models import (
    DETACHED_SENTINEL,
    BranchMenu,
    BranchOption,
    NewBranchInput,
    PushPullAction,
    PushPullTile,
    StatusBarModel,
)
from reposync.status_bar._protocol import Confirm, Notifier
from reposync.status_bar._tiles import (
    build_branch_menu,
    changed_files_label,
    compute_push_pull_tile,
    push_pull_label,
)

__all__ = [
    "DETACHED_SENTINEL",
    "FORCE_PUSH_DETAIL",
    "FORCE_PUSH_MESSAGE",
    "BranchMenu",
    "BranchOption",
    "Confirm",
    "FakeConfirm",
    "FakeNotifier",
    "NewBranchInput",
    "Notification",
    "Notifier",
    "PushPullAction",
    "PushPullTile",
    "StatusBarController",
    "StatusBarModel",
    "build_branch_menu",
    "changed_files_label",
    "compute_push_pull_tile",
    "push_pull_label",
]
