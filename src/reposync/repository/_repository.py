# ruff: noqa: TC003  # Path needed at runtime for attribute annotations
"""Repository synchronization engine.

This module provides the Repository class, which caches git state for a
presentation layer and runs mutating operations (checkout, fetch, pull,
push, stage, commit) under per-class in-progress flags.
"""

from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn, Self, cast, final

import anyio
import structlog

from reposync.backend import GitBackend, GitCliBackend
from reposync.exceptions import (
    BranchExistsError,
    GitCommandError,
    MergeConflictError,
    NoRemoteError,
    SyncOperationError,
)
from reposync.repository._classify import (
    classify_checkout_error,
    classify_push_error,
    looks_like_merge_conflict,
)
from reposync.repository._models import (
    AheadBehind,
    BranchState,
    OperationKind,
    RepositoryState,
)
from reposync.repository._operations import OperationStates
from reposync.utils import find_worktree_root

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reposync.status_bar._protocol import Notifier

type Unsubscribe = Callable[[], None]

# Exit status git uses for "not found" answers that are not errors.
_NOT_FOUND: Final = 1

_DESCRIBE_PREFIXES: Final = ("heads/", "tags/", "remotes/")


def parse_changed_paths(porcelain: str) -> frozenset[str]:
    """Return the distinct paths in ``status --porcelain=v1 -z`` output.

    Rename and copy entries are followed by their source path as an extra
    NUL-separated field; only the destination path is counted.

    Args:
        porcelain: Raw NUL-separated status output.

    Returns:
        Distinct repository-relative paths.
    """
    paths: set[str] = set()
    fields = iter(porcelain.split("\0"))
    for entry in fields:
        if len(entry) < 4:  # noqa: PLR2004
            continue
        xy, path = entry[:2], entry[3:]
        paths.add(path)
        if "R" in xy or "C" in xy:
            _ = next(fields, None)
    return frozenset(paths)


def _strip_describe_prefix(name: str) -> str:
    for prefix in _DESCRIBE_PREFIXES:
        if name.startswith(prefix):
            return name.removeprefix(prefix)
    return name


@final
class Repository:
    """Cached git state and supervised mutating operations for one working tree.

    Queries are cached until the next invalidation. Every successful mutating
    operation invalidates automatically; refresh() covers changes made
    outside this object. A load that started before an invalidation is never
    stored.

    A Repository built without a backend is absent: every query returns an
    empty value and every operation does nothing.

    Attributes:
        root: Working-tree directory identifying this repository.
        operation_states: In-progress flags, one per operation class.
        default_remote: Remote used for branches without an upstream.
        prune_on_fetch: Pass ``--prune`` to fetch.
    """

    __slots__ = (
        "_backend",
        "_cache",
        "_did_change_operation_states",
        "_did_update",
        "_generation",
        "_logger",
        "_notifier",
        "default_remote",
        "operation_states",
        "prune_on_fetch",
        "root",
    )

    def __init__(
        self,
        root: Path,
        backend: GitBackend | None = None,
        *,
        notifier: "Notifier | None" = None,
        default_remote: str = "origin",
        prune_on_fetch: bool = False,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        """Initialize the repository.

        Args:
            root: Working-tree directory.
            backend: Git backend, or None for an absent repository.
            notifier: Receives classified failures before they are raised.
            default_remote: Remote used for branches without an upstream.
            prune_on_fetch: Pass ``--prune`` to fetch.
            logger: Structured logger. Defaults to the ``reposync`` logger.
        """
        self.root = root
        self.default_remote = default_remote
        self.prune_on_fetch = prune_on_fetch
        self._backend = backend
        self._notifier = notifier
        base_logger = logger or cast(
            "FilteringBoundLogger", structlog.get_logger("reposync")
        )
        self._logger = base_logger.bind(root=str(root))
        self._cache: dict[str, object] = {}
        self._generation = 0
        self._did_update: list[Callable[[], None]] = []
        self._did_change_operation_states: list[Callable[[], None]] = []
        self.operation_states = OperationStates(
            did_update=self._emit_operation_states_changed
        )

    @classmethod
    def open(
        cls,
        path: Path | None = None,
        *,
        git_executable: str = "git",
        notifier: "Notifier | None" = None,
        default_remote: str = "origin",
        prune_on_fetch: bool = False,
        logger: "FilteringBoundLogger | None" = None,
    ) -> Self:
        """Open the repository containing path.

        Outside a git working tree the result is an absent repository
        rooted at path.

        Args:
            path: Directory inside the working tree. Defaults to the
                current directory.
            git_executable: Name or path of the git binary.
            notifier: Receives classified failures.
            default_remote: Remote used for branches without an upstream.
            prune_on_fetch: Pass ``--prune`` to fetch.
            logger: Structured logger.

        Returns:
            A Repository, present if a working tree was found.
        """
        start = (path or Path.cwd()).resolve()
        root = find_worktree_root(start)
        backend = (
            GitCliBackend(root, git_executable=git_executable)
            if root is not None
            else None
        )
        return cls(
            root or start,
            backend,
            notifier=notifier,
            default_remote=default_remote,
            prune_on_fetch=prune_on_fetch,
            logger=logger,
        )

    @property
    def present(self) -> bool:
        """Return True if a working tree is associated."""
        return self._backend is not None

    @property
    def generation(self) -> int:
        """Return the cache generation, bumped by every invalidation."""
        return self._generation

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def on_did_update(self, callback: Callable[[], None]) -> Unsubscribe:
        """Call callback once per cache invalidation.

        Returns:
            A function that removes the subscription.
        """
        return self._subscribe(self._did_update, callback)

    def on_did_change_operation_states(
        self, callback: Callable[[], None]
    ) -> Unsubscribe:
        """Call callback whenever an in-progress flag changes value.

        Returns:
            A function that removes the subscription.
        """
        return self._subscribe(self._did_change_operation_states, callback)

    @staticmethod
    def _subscribe(
        callbacks: list[Callable[[], None]], callback: Callable[[], None]
    ) -> Unsubscribe:
        callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _emit_operation_states_changed(self) -> None:
        for callback in list(self._did_change_operation_states):
            callback()

    # =========================================================================
    # Cache
    # =========================================================================

    def invalidate(self) -> None:
        """Drop every cached value and notify did-update subscribers once."""
        self._generation += 1
        self._cache.clear()
        self._logger.debug("cache_invalidated", generation=self._generation)
        for callback in list(self._did_update):
            callback()

    def refresh(self) -> None:
        """Invalidate after changes made outside this Repository."""
        self.invalidate()

    async def _cached[T](self, key: str, load: Callable[[], Awaitable[T]]) -> T:
        if key in self._cache:
            return cast("T", self._cache[key])
        generation = self._generation
        value = await load()
        if generation == self._generation:
            self._cache[key] = value
        return value

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_current_branch(self) -> BranchState | None:
        """Return the current branch, or None when absent."""
        if self._backend is None:
            return None
        return await self._cached("branch", self._load_branch)

    async def get_branches(self) -> tuple[str, ...]:
        """Return local branch names sorted alphabetically."""
        if self._backend is None:
            return ()
        return await self._cached("branches", self._load_branches)

    async def get_remotes(self) -> tuple[str, ...]:
        """Return configured remote names."""
        if self._backend is None:
            return ()
        return await self._cached("remotes", self._load_remotes)

    async def get_ahead_behind(self) -> AheadBehind:
        """Return divergence of the current branch from its upstream."""
        if self._backend is None:
            return AheadBehind.unknown()
        return await self._cached("ahead_behind", self._load_ahead_behind)

    async def get_changed_file_count(self) -> int:
        """Return the number of distinct paths with uncommitted changes."""
        if self._backend is None:
            return 0
        return await self._cached("changed_file_count", self._load_changed_count)

    async def is_merging(self) -> bool:
        """Return True while a conflicted merge awaits resolution."""
        if self._backend is None:
            return False
        return await self._cached("merging", self._merge_head_exists)

    async def read_state(self) -> RepositoryState:
        """Read every query from a single cache generation.

        Reads are repeated if an invalidation lands while they are in
        flight, so the returned snapshot never mixes generations.
        """
        if self._backend is None:
            return RepositoryState.absent(self.operation_states.snapshot())
        while True:
            generation = self._generation
            branch = await self.get_current_branch()
            ahead_behind = await self.get_ahead_behind()
            changed_file_count = await self.get_changed_file_count()
            merging = await self.is_merging()
            if generation == self._generation:
                return RepositoryState(
                    present=True,
                    branch=branch,
                    ahead_behind=ahead_behind,
                    changed_file_count=changed_file_count,
                    operation_states=self.operation_states.snapshot(),
                    merge_in_progress=merging,
                    generation=generation,
                )
            self._logger.debug("state_read_retried", generation=self._generation)

    # =========================================================================
    # Loaders
    # =========================================================================

    async def _git(self, *argv: str) -> list[str]:
        backend = cast("GitBackend", self._backend)
        result = await backend.execute(argv)
        return result.lines

    async def _load_branch(self) -> BranchState:
        try:
            lines = await self._git("symbolic-ref", "--short", "-q", "HEAD")
        except GitCommandError as e:
            if e.exit_code != _NOT_FOUND:
                raise
            return BranchState(await self._describe_head(), is_detached=True)
        return BranchState(lines[0] if lines else "HEAD")

    async def _describe_head(self) -> str:
        try:
            lines = await self._git("describe", "--contains", "--all", "HEAD")
        except GitCommandError:
            lines = await self._git("rev-parse", "--short", "HEAD")
            return lines[0] if lines else "HEAD"
        return _strip_describe_prefix(lines[0]) if lines else "HEAD"

    async def _load_branches(self) -> tuple[str, ...]:
        lines = await self._git(
            "for-each-ref", "--format=%(refname:short)", "refs/heads/"
        )
        return tuple(sorted(lines))

    async def _load_remotes(self) -> tuple[str, ...]:
        return tuple(await self._git("remote"))

    async def _load_ahead_behind(self) -> AheadBehind:
        branch = await self.get_current_branch()
        if branch is None or branch.is_detached:
            return AheadBehind.detached()
        if not await self.get_remotes():
            return AheadBehind.no_remote()
        try:
            upstream_lines = await self._git(
                "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"
            )
            counts = await self._git(
                "rev-list", "--left-right", "--count", "@{upstream}...HEAD"
            )
        except GitCommandError:
            return AheadBehind.no_upstream()
        behind, ahead = (int(part) for part in counts[0].split())
        upstream = upstream_lines[0] if upstream_lines else None
        return AheadBehind.tracking(ahead, behind, upstream)

    async def _load_changed_count(self) -> int:
        backend = cast("GitBackend", self._backend)
        result = await backend.execute(
            ["status", "--porcelain=v1", "-z", "--untracked-files=all"]
        )
        return len(parse_changed_paths(result.stdout))

    async def _merge_head_exists(self) -> bool:
        try:
            _ = await self._git("rev-parse", "-q", "--verify", "MERGE_HEAD")
        except GitCommandError:
            return False
        return True

    async def _branch_exists(self, name: str) -> bool:
        try:
            _ = await self._git("show-ref", "--verify", "--quiet", f"refs/heads/{name}")
        except GitCommandError as e:
            if e.exit_code != _NOT_FOUND:
                raise
            return False
        return True

    async def _tracking_remote(self, branch: str) -> str | None:
        try:
            lines = await self._git("config", "--get", f"branch.{branch}.remote")
        except GitCommandError:
            return None
        return lines[0] if lines else None

    def _pick_default_remote(self, remotes: Sequence[str]) -> str:
        if self.default_remote in remotes:
            return self.default_remote
        return remotes[0]

    # =========================================================================
    # Failure reporting
    # =========================================================================

    def _raise_unclassified(
        self, operation: OperationKind | str, cause: GitCommandError
    ) -> NoReturn:
        """Log and re-raise a git failure that has no classification."""
        self._logger.warning(
            "operation_failed",
            operation=str(operation),
            exit_code=cause.exit_code,
            stderr=cause.stderr.strip(),
        )
        raise cause

    def _raise_classified(
        self,
        operation: OperationKind,
        error: SyncOperationError,
        cause: GitCommandError | None,
    ) -> NoReturn:
        """Notify and raise a classified error."""
        self._logger.warning(
            "operation_failed",
            operation=str(operation),
            kind=str(error.kind),
            title=error.title,
        )
        if self._notifier is not None:
            if error.level == "warning":
                self._notifier.add_warning(error.title, description=error.description)
            else:
                self._notifier.add_error(error.title, description=error.description)
        raise error from cause

    def _is_busy(self, kind: OperationKind) -> bool:
        if self.operation_states.is_in_progress(kind):
            self._logger.debug("operation_skipped", operation=str(kind))
            return True
        return False

    # =========================================================================
    # Branch operations
    # =========================================================================

    async def checkout(self, branch: str, *, create_new: bool = False) -> None:
        """Check out a branch, optionally creating it first.

        Does nothing while another checkout is in progress. On failure the
        cached state is left untouched.

        Args:
            branch: Branch (or commit-ish) to check out, or name to create.
            create_new: Create the branch at HEAD before checking it out.

        Raises:
            BranchExistsError: If create_new and the branch already exists.
            CheckoutConflictError: If local changes would be overwritten.
            GitCommandError: For unrecognised git failures.
        """
        if self._backend is None or self._is_busy(OperationKind.CHECKOUT):
            return

        with (
            self.operation_states.track(OperationKind.CHECKOUT),
            anyio.CancelScope(shield=True),
        ):
            self._logger.info("checkout_started", branch=branch, create_new=create_new)
            if create_new and await self._branch_exists(branch):
                self._raise_classified(
                    OperationKind.CHECKOUT, BranchExistsError(branch), None
                )
            argv = ["checkout", "-b", branch] if create_new else ["checkout", branch]
            try:
                _ = await self._git(*argv)
            except GitCommandError as e:
                error = classify_checkout_error(e, branch)
                if error is None:
                    self._raise_unclassified(OperationKind.CHECKOUT, e)
                self._raise_classified(OperationKind.CHECKOUT, error, e)
            self._logger.info("checkout_completed", branch=branch)

        self.invalidate()

    async def create_and_checkout(self, name: str) -> None:
        """Create a branch at HEAD and check it out."""
        await self.checkout(name, create_new=True)

    # =========================================================================
    # Synchronization operations
    # =========================================================================

    async def fetch(self) -> None:
        """Fetch from the remote tracking the current branch.

        Falls back to the default remote for untracked branches. Does nothing
        while a fetch is in progress or when no remote is configured.

        Raises:
            GitCommandError: If git fails.
        """
        if self._backend is None or self._is_busy(OperationKind.FETCH):
            return

        with (
            self.operation_states.track(OperationKind.FETCH),
            anyio.CancelScope(shield=True),
        ):
            remotes = await self.get_remotes()
            if not remotes:
                self._logger.info("fetch_skipped", reason="no_remote")
                return
            branch = await self.get_current_branch()
            remote = None
            if branch is not None and not branch.is_detached:
                remote = await self._tracking_remote(branch.name)
            remote = remote or self._pick_default_remote(remotes)

            argv = ["fetch", *(["--prune"] if self.prune_on_fetch else []), remote]
            self._logger.info("fetch_started", remote=remote)
            try:
                _ = await self._git(*argv)
            except GitCommandError as e:
                self._raise_unclassified(OperationKind.FETCH, e)
            self._logger.info("fetch_completed", remote=remote)

        self.invalidate()

    async def pull(self) -> None:
        """Merge the upstream into the current branch.

        Does nothing while a pull is in progress. When the merge stops on
        conflicts the working-tree changes are kept, the pull flag is cleared
        and the cache invalidated so is_merging() reports the merge, and then
        a warning is raised.

        Raises:
            MergeConflictError: If the merge left unresolved conflicts.
            GitCommandError: For other git failures.
        """
        if self._backend is None or self._is_busy(OperationKind.PULL):
            return

        conflict: MergeConflictError | None = None
        with (
            self.operation_states.track(OperationKind.PULL),
            anyio.CancelScope(shield=True),
        ):
            self._logger.info("pull_started")
            try:
                _ = await self._git("pull", "--no-edit", "--no-rebase")
            except GitCommandError as e:
                if not (
                    await self._merge_head_exists() or looks_like_merge_conflict(e)
                ):
                    self._raise_unclassified(OperationKind.PULL, e)
                conflict = MergeConflictError(cause=e)
            else:
                self._logger.info("pull_completed")

        self.invalidate()
        if conflict is not None:
            self._raise_classified(OperationKind.PULL, conflict, conflict.cause)

    async def push(
        self,
        branch: str,
        *,
        force: bool = False,
        set_upstream: bool = False,
    ) -> None:
        """Push a branch to its remote.

        A branch without an upstream is published to the default remote with
        ``--set-upstream``. Does nothing while a push is in progress. On
        rejection the cached state is left untouched.

        Args:
            branch: Local branch to push.
            force: Overwrite the remote branch.
            set_upstream: Record the remote branch as upstream.

        Raises:
            NoRemoteError: If no remote is configured.
            PushRejectedError: If the remote refused the update.
            GitCommandError: For unrecognised git failures.
        """
        if self._backend is None or self._is_busy(OperationKind.PUSH):
            return

        with (
            self.operation_states.track(OperationKind.PUSH),
            anyio.CancelScope(shield=True),
        ):
            remotes = await self.get_remotes()
            if not remotes:
                self._logger.warning("push_failed", reason="no_remote", branch=branch)
                msg = f"Cannot push {branch}: no remote is configured"
                raise NoRemoteError(msg, branch=branch)

            remote = await self._tracking_remote(branch)
            if remote is None:
                remote = self._pick_default_remote(remotes)
                set_upstream = True

            argv = ["push", "--porcelain"]
            if force:
                argv.append("--force")
            if set_upstream:
                argv.append("--set-upstream")
            argv.extend([remote, branch])

            self._logger.info(
                "push_started",
                remote=remote,
                branch=branch,
                force=force,
                set_upstream=set_upstream,
            )
            try:
                _ = await self._git(*argv)
            except GitCommandError as e:
                error = classify_push_error(e)
                if error is None:
                    self._raise_unclassified(OperationKind.PUSH, e)
                self._raise_classified(OperationKind.PUSH, error, e)
            self._logger.info("push_completed", remote=remote, branch=branch)

        self.invalidate()

    # =========================================================================
    # Working-tree operations
    # =========================================================================

    async def stage_files(self, paths: Sequence[str]) -> None:
        """Stage the given paths, including deletions.

        Raises:
            GitCommandError: If git fails.
        """
        if self._backend is None or not paths:
            return
        with anyio.CancelScope(shield=True):
            try:
                _ = await self._git("add", "--all", "--", *paths)
            except GitCommandError as e:
                self._raise_unclassified("stage", e)
        self._logger.info("files_staged", count=len(paths))
        self.invalidate()

    async def commit(self, message: str, *, allow_empty: bool = False) -> None:
        """Commit staged changes.

        Raises:
            GitCommandError: If git fails, e.g. with nothing to commit.
        """
        if self._backend is None:
            return
        argv = ["commit", "-m", message]
        if allow_empty:
            argv.append("--allow-empty")
        with anyio.CancelScope(shield=True):
            try:
                _ = await self._git(*argv)
            except GitCommandError as e:
                self._raise_unclassified("commit", e)
        self._logger.info("commit_created")
        self.invalidate()
