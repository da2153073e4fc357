"""Status bar view models.

Presentation-neutral values derived from a RepositoryState: the branch menu,
the push/pull tile and the changed-files tile.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

from reposync.repository import RepositoryState

DETACHED_SENTINEL: Final = "detached"


@dataclass(frozen=True, slots=True)
class BranchOption:
    """One entry in the branch menu.

    Attributes:
        label: Text shown for the entry.
        value: Value submitted when the entry is selected.
        disabled: True for entries that cannot be selected.
    """

    label: str
    value: str
    disabled: bool = False


@dataclass(frozen=True, slots=True)
class BranchMenu:
    """Branch selection menu.

    Attributes:
        options: Entries in display order.
        selected: Value of the selected entry, or None when absent.
        disabled: True while a checkout is in progress.
    """

    options: tuple[BranchOption, ...] = ()
    selected: str | None = None
    disabled: bool = False

    @property
    def values(self) -> tuple[str, ...]:
        """Return option values in display order."""
        return tuple(option.value for option in self.options)


@dataclass(frozen=True, slots=True)
class NewBranchInput:
    """Editor for the name of a branch to create.

    Attributes:
        visible: True while the editor replaces the branch menu.
        text: Name typed so far. Kept when creation fails.
        read_only: True while the branch is being created.
    """

    visible: bool = False
    text: str = ""
    read_only: bool = False


class PushPullAction(StrEnum):
    """What clicking the push/pull tile does."""

    NONE = "none"
    FETCH = "fetch"
    PULL = "pull"
    PUSH = "push"
    PUBLISH = "publish"


@dataclass(frozen=True, slots=True)
class PushPullTile:
    """Push/pull tile contents.

    Attributes:
        label: Text shown on the tile; empty when hidden.
        action: Action performed on click.
        busy: True while any of fetch, pull or push is in progress.
    """

    label: str
    action: PushPullAction
    busy: bool = False

    @property
    def inert(self) -> bool:
        """Return True if clicking the tile does nothing."""
        return self.action is PushPullAction.NONE


@dataclass(frozen=True, slots=True)
class StatusBarModel:
    """Everything a status bar renders after one refresh.

    Attributes:
        state: Repository snapshot the model was derived from.
        branch_menu: Branch tile contents, None when hidden.
        push_pull: Push/pull tile contents, None when hidden.
        changed_files_label: Changed-files tile text, always shown.
        new_branch_input: New-branch editor state.
    """

    state: RepositoryState
    branch_menu: BranchMenu | None
    push_pull: PushPullTile | None
    changed_files_label: str
    new_branch_input: NewBranchInput = field(default_factory=NewBranchInput)

    @property
    def present(self) -> bool:
        """Return True if the repository is present."""
        return self.state.present
