"""Status bar controller.

Bridges presentation requests (select a branch, click the push/pull tile,
force push) to Repository operations and rebuilds the StatusBarModel.
"""

from typing import TYPE_CHECKING, Final, cast, final

import structlog

from reposync.repository import AheadBehindStatus, Repository
from reposync.status_bar._models import (
    DETACHED_SENTINEL,
    NewBranchInput,
    PushPullAction,
    StatusBarModel,
)
from reposync.status_bar._tiles import (
    build_branch_menu,
    changed_files_label,
    compute_push_pull_tile,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reposync.status_bar._protocol import Confirm

FORCE_PUSH_MESSAGE: Final = "Are you sure you want to force push?"
FORCE_PUSH_DETAIL: Final = "This operation could result in losing data on the remote."


@final
class StatusBarController:
    """Drives a Repository on behalf of a status bar.

    Errors raised by the repository propagate unchanged; the repository has
    already notified them.

    Attributes:
        repository: Repository the status bar reflects.
        model: Model from the most recent refresh_model_data() call.
    """

    __slots__ = (
        "_confirm",
        "_logger",
        "_new_branch",
        "_pending_branch",
        "model",
        "repository",
    )

    def __init__(
        self,
        repository: Repository,
        *,
        confirm: "Confirm | None" = None,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the controller.

        Args:
            repository: Repository the status bar reflects.
            confirm: Asked before force pushing. Without one, force push
                is refused.
            logger: Structured logger. Defaults to the ``reposync`` logger.
        """
        self.repository = repository
        self.model: StatusBarModel | None = None
        self._confirm = confirm
        self._pending_branch: str | None = None
        self._new_branch = NewBranchInput()
        self._logger = logger or cast(
            "FilteringBoundLogger", structlog.get_logger("reposync")
        )

    async def refresh_model_data(self) -> StatusBarModel:
        """Re-read repository state and rebuild the model.

        An absent repository hides the branch and push/pull tiles but keeps
        the changed-files tile.
        """
        state = await self.repository.read_state()
        if not state.present:
            model = StatusBarModel(state, None, None, changed_files_label(0))
        else:
            branches = await self.repository.get_branches()
            menu = build_branch_menu(
                state.branch,
                branches,
                checkout_in_progress=state.operation_states.checkout,
                pending=self._pending_branch,
            )
            model = StatusBarModel(
                state,
                menu,
                compute_push_pull_tile(state.ahead_behind, state.operation_states),
                changed_files_label(state.changed_file_count),
                self._new_branch,
            )
        self.model = model
        return model

    # =========================================================================
    # Branch tile
    # =========================================================================

    def _checkout_busy(self) -> bool:
        if self.repository.operation_states.is_checkout_in_progress():
            self._logger.debug("branch_request_ignored", reason="checkout_in_progress")
            return True
        return False

    async def select_branch(self, value: str) -> None:
        """Check out the branch chosen in the menu.

        Selecting the detached placeholder does nothing, as does any request
        made while a checkout is running.
        """
        if value == DETACHED_SENTINEL or self._checkout_busy():
            return
        self._pending_branch = value
        try:
            await self.repository.checkout(value)
        finally:
            self._pending_branch = None

    # =========================================================================
    # New-branch editor
    # =========================================================================

    def open_new_branch_input(self) -> None:
        """Show an empty new-branch editor."""
        if not self._new_branch.visible:
            self._new_branch = NewBranchInput(visible=True)

    def set_new_branch_text(self, text: str) -> None:
        """Replace the editor text unless a branch is being created."""
        if self._new_branch.read_only:
            return
        self._new_branch = NewBranchInput(visible=True, text=text)

    def close_new_branch_input(self) -> None:
        """Hide the editor unless a branch is being created."""
        if not self._new_branch.read_only:
            self._new_branch = NewBranchInput()

    async def create_branch(self, name: str | None = None) -> None:
        """Create a branch at HEAD and check it out.

        The editor is read-only while the branch is created. It is hidden on
        success; on failure it keeps the typed name and becomes editable.

        Args:
            name: Branch name. Defaults to the editor text.
        """
        text = self._new_branch.text if name is None else name
        branch = text.strip()
        if not branch or self._checkout_busy():
            return
        self._pending_branch = branch
        self._new_branch = NewBranchInput(visible=True, text=text, read_only=True)
        try:
            await self.repository.create_and_checkout(branch)
        except Exception:
            self._new_branch = NewBranchInput(visible=True, text=text)
            raise
        else:
            self._new_branch = NewBranchInput()
        finally:
            self._pending_branch = None

    # =========================================================================
    # Push/pull tile
    # =========================================================================

    async def fetch(self) -> None:
        """Fetch from the current branch's remote."""
        await self.repository.fetch()

    async def pull(self) -> None:
        """Pull into the current branch."""
        await self.repository.pull()

    async def push(self, *, force: bool = False) -> None:
        """Push the current branch.

        A branch without an upstream is published with set_upstream. Does
        nothing on a detached HEAD or an absent repository.
        """
        branch = await self.repository.get_current_branch()
        if branch is None or branch.is_detached:
            return
        ahead_behind = await self.repository.get_ahead_behind()
        await self.repository.push(
            branch.name,
            force=force,
            set_upstream=ahead_behind.status is AheadBehindStatus.NO_UPSTREAM,
        )

    async def force_push(self) -> bool:
        """Force push the current branch after confirmation.

        Returns:
            True if the user accepted and the push ran.
        """
        if self._confirm is None or not self._confirm(
            FORCE_PUSH_MESSAGE, detail=FORCE_PUSH_DETAIL
        ):
            self._logger.info("force_push_declined")
            return False
        await self.push(force=True)
        return True

    async def click_push_pull(self) -> None:
        """Run the action the push/pull tile currently shows.

        Does nothing while any of fetch, pull or push is in progress.
        """
        if self.repository.operation_states.any_sync_in_progress():
            self._logger.debug("push_pull_click_ignored", reason="sync_in_progress")
            return
        tile = compute_push_pull_tile(await self.repository.get_ahead_behind())
        match tile.action:
            case PushPullAction.FETCH:
                await self.fetch()
            case PushPullAction.PULL:
                await self.pull()
            case PushPullAction.PUSH | PushPullAction.PUBLISH:
                await self.push()
            case PushPullAction.NONE:
                pass
