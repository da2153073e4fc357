"""Tests for Repository mutating operations."""

import anyio
import pytest
from structlog.testing import capture_logs

from reposync.backend import FakeGitBackend
from reposync.exceptions import (
    BranchExistsError,
    CheckoutConflictError,
    GitCommandError,
    MergeConflictError,
    NoRemoteError,
    PushRejectedError,
)
from reposync.repository import AheadBehind, BranchState, OperationKind, Repository
from reposync.status_bar import FakeNotifier

CHECKOUT_CONFLICT = """\
error: Your local changes to the following files would be overwritten by checkout:
\tREADME.md
Please commit your changes or stash them before you switch branches.
Aborting
"""

PUSH_REJECTED_PORCELAIN = (
    "To /tmp/remote.git\n"
    "!\trefs/heads/master:refs/heads/master\t[rejected] (fetch first)\n"
    "Done\n"
)

# =============================================================================
# Checkout
# =============================================================================


@pytest.mark.anyio
class TestCheckout:
    async def test_checkout_switches_and_invalidates(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        assert await repository.get_current_branch() == BranchState("master")
        await repository.checkout("feature")
        assert ("checkout", "feature") in backend.calls
        assert repository.generation == 1
        assert await repository.get_current_branch() == BranchState("feature")
        assert repository.operation_states.is_checkout_in_progress() is False

    async def test_create_and_checkout(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        await repository.create_and_checkout("topic")
        assert ("checkout", "-b", "topic") in backend.calls
        assert await repository.get_branches() == ("feature", "master", "topic")

    async def test_create_existing_branch_fails_without_checkout(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        with pytest.raises(BranchExistsError) as exc_info:
            await repository.checkout("feature", create_new=True)
        assert exc_info.value.branch == "feature"
        assert backend.calls_to("checkout") == []
        assert [n.title for n in notifier.errors] == ["Cannot create branch"]
        assert repository.operation_states.is_checkout_in_progress() is False

    async def test_conflict_keeps_cached_branch(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        _ = await repository.get_current_branch()
        backend.fail("checkout", stderr=CHECKOUT_CONFLICT)

        with pytest.raises(CheckoutConflictError) as exc_info:
            await repository.checkout("feature")

        assert exc_info.value.paths == ("README.md",)
        assert isinstance(exc_info.value.cause, GitCommandError)
        assert repository.generation == 0
        assert await repository.get_current_branch() == BranchState("master")
        assert len(backend.calls_to("symbolic-ref")) == 1
        assert len(notifier.errors) == 1
        assert "README.md" in notifier.errors[0].description

    async def test_unrecognised_failure_is_raised_raw(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        backend.fail("checkout", stderr="error: pathspec 'nope' did not match")
        with pytest.raises(GitCommandError):
            await repository.checkout("nope")
        assert notifier.notifications == []
        assert repository.operation_states.is_checkout_in_progress() is False

    async def test_skipped_while_checkout_in_progress(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        repository.operation_states.set_checkout_in_progress(True)
        await repository.checkout("feature")
        assert backend.calls_to("checkout") == []


# =============================================================================
# Fetch
# =============================================================================


@pytest.mark.anyio
class TestFetch:
    async def test_fetches_tracking_remote(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        await repository.fetch()
        assert backend.calls_to("fetch") == [("fetch", "origin")]
        assert repository.generation == 1

    async def test_prune(self, backend: FakeGitBackend) -> None:
        repository = Repository(backend.root, backend, prune_on_fetch=True)
        await repository.fetch()
        assert backend.calls_to("fetch") == [("fetch", "--prune", "origin")]

    async def test_untracked_branch_uses_default_remote(
        self, backend: FakeGitBackend
    ) -> None:
        backend.upstream = None
        backend.remotes = ["mirror", "origin"]
        repository = Repository(backend.root, backend)
        await repository.fetch()
        assert backend.calls_to("fetch") == [("fetch", "origin")]

    async def test_first_remote_when_default_missing(
        self, backend: FakeGitBackend
    ) -> None:
        backend.upstream = None
        backend.remotes = ["mirror", "other"]
        repository = Repository(backend.root, backend)
        await repository.fetch()
        assert backend.calls_to("fetch") == [("fetch", "mirror")]

    async def test_no_remote_skips(self, backend: FakeGitBackend) -> None:
        backend.remotes = []
        repository = Repository(backend.root, backend)
        await repository.fetch()
        assert backend.calls_to("fetch") == []
        assert repository.generation == 0
        assert repository.operation_states.is_fetch_in_progress() is False

    async def test_failure_clears_flag(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        backend.fail("fetch", stderr="fatal: could not read from remote", exit_code=128)
        with pytest.raises(GitCommandError):
            await repository.fetch()
        assert repository.operation_states.is_fetch_in_progress() is False
        assert notifier.notifications == []

    async def test_operation_state_changes_are_announced(
        self, repository: Repository
    ) -> None:
        seen: list[bool] = []
        _ = repository.on_did_change_operation_states(
            lambda: seen.append(repository.operation_states.is_fetch_in_progress())
        )
        await repository.fetch()
        assert seen == [True, False]


# =============================================================================
# Pull
# =============================================================================


@pytest.mark.anyio
class TestPull:
    async def test_pull(self, backend: FakeGitBackend, repository: Repository) -> None:
        backend.behind = 3
        await repository.pull()
        assert backend.calls_to("pull") == [("pull", "--no-edit", "--no-rebase")]
        assert await repository.get_ahead_behind() == AheadBehind.tracking(
            0, 0, "origin/master"
        )

    async def test_conflict_warns_and_reports_merge(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        assert await repository.is_merging() is False
        backend.fail(
            "pull",
            stdout="CONFLICT (content): Merge conflict in a.txt\n"
            "Automatic merge failed; fix conflicts and then commit the result.\n",
        )
        backend.merging = True

        with pytest.raises(MergeConflictError):
            await repository.pull()

        assert [n.title for n in notifier.warnings] == ["Merge conflicts"]
        assert notifier.errors == []
        assert await repository.is_merging() is True
        assert (await repository.read_state()).merge_in_progress is True
        assert repository.operation_states.is_pull_in_progress() is False

    async def test_conflict_update_sees_pull_finished(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        backend.fail("pull", stdout="CONFLICT (content): Merge conflict in a.txt\n")
        backend.merging = True
        seen: list[bool] = []
        _ = repository.on_did_update(
            lambda: seen.append(repository.operation_states.is_pull_in_progress())
        )

        with pytest.raises(MergeConflictError):
            await repository.pull()

        assert seen == [False]

    async def test_other_failure_is_raw(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        backend.fail("pull", stderr="fatal: unable to access remote", exit_code=128)
        with pytest.raises(GitCommandError):
            await repository.pull()
        assert notifier.notifications == []


# =============================================================================
# Push
# =============================================================================


@pytest.mark.anyio
class TestPush:
    async def test_push_tracking_branch(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        backend.ahead = 2
        await repository.push("master")
        assert backend.calls_to("push") == [("push", "--porcelain", "origin", "master")]
        assert backend.ahead == 0
        assert repository.generation == 1

    async def test_force(self, backend: FakeGitBackend, repository: Repository) -> None:
        await repository.push("master", force=True)
        assert backend.calls_to("push") == [
            ("push", "--porcelain", "--force", "origin", "master")
        ]

    async def test_publish_sets_upstream(self, backend: FakeGitBackend) -> None:
        backend.upstream = None
        repository = Repository(backend.root, backend)
        await repository.push("master")
        assert backend.calls_to("push") == [
            ("push", "--porcelain", "--set-upstream", "origin", "master")
        ]
        assert await repository.get_ahead_behind() == AheadBehind.tracking(
            0, 0, "origin/master"
        )

    async def test_no_remote(self, backend: FakeGitBackend) -> None:
        backend.remotes = []
        repository = Repository(backend.root, backend)
        with pytest.raises(NoRemoteError) as exc_info:
            await repository.push("master")
        assert exc_info.value.branch == "master"
        assert backend.calls_to("push") == []
        assert repository.operation_states.is_push_in_progress() is False

    async def test_rejected_keeps_cached_state(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        notifier: FakeNotifier,
    ) -> None:
        backend.ahead = 1
        before = await repository.get_ahead_behind()
        backend.fail("push", stdout=PUSH_REJECTED_PORCELAIN)

        with pytest.raises(PushRejectedError):
            await repository.push("master")

        assert await repository.get_ahead_behind() == before
        assert repository.generation == 0
        assert [n.title for n in notifier.errors] == ["Push rejected"]

    async def test_logs_classified_failure(self, backend: FakeGitBackend) -> None:
        backend.fail("push", stdout=PUSH_REJECTED_PORCELAIN)
        with capture_logs() as logs:
            repository = Repository(backend.root, backend)
            with pytest.raises(PushRejectedError):
                await repository.push("master")

        failed = [entry for entry in logs if entry["event"] == "operation_failed"]
        assert failed[0]["operation"] == "push"
        assert failed[0]["kind"] == "push-rejected"
        assert failed[0]["log_level"] == "warning"


# =============================================================================
# Working tree
# =============================================================================


@pytest.mark.anyio
class TestWorkingTree:
    async def test_stage_files(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        await repository.stage_files(["a.txt", "b.txt"])
        assert backend.calls_to("add") == [("add", "--all", "--", "a.txt", "b.txt")]
        assert repository.generation == 1

    async def test_stage_nothing(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        await repository.stage_files([])
        assert backend.calls_to("add") == []

    async def test_commit(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        await repository.commit("Add things", allow_empty=True)
        assert backend.calls_to("commit") == [
            ("commit", "-m", "Add things", "--allow-empty")
        ]
        assert backend.ahead == 1

    async def test_commit_failure(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        backend.fail("commit", stdout="nothing to commit, working tree clean")
        with pytest.raises(GitCommandError):
            await repository.commit("Nothing")
        assert repository.generation == 0


# =============================================================================
# Concurrency
# =============================================================================


@pytest.mark.anyio
class TestConcurrency:
    async def test_same_class_request_is_dropped(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        gate = backend.hold("push")
        async with anyio.create_task_group() as tg:
            tg.start_soon(repository.push, "master")
            await backend.wait_for_call("push")
            assert repository.operation_states.is_push_in_progress() is True
            await repository.push("master")
            assert len(backend.calls_to("push")) == 1
            gate.set()
        assert repository.operation_states.is_push_in_progress() is False

    @pytest.mark.parametrize(
        ("operation", "command"),
        [
            ("fetch", "fetch"),
            ("pull", "pull"),
        ],
    )
    async def test_held_sync_request_is_dropped(
        self,
        backend: FakeGitBackend,
        repository: Repository,
        operation: str,
        command: str,
    ) -> None:
        run = getattr(repository, operation)
        gate = backend.hold(command)
        async with anyio.create_task_group() as tg:
            tg.start_soon(run)
            await backend.wait_for_call(command)
            assert repository.operation_states.is_in_progress(OperationKind(operation))
            await run()
            await run()
            assert len(backend.calls_to(command)) == 1
            gate.set()
        assert len(backend.calls_to(command)) == 1
        assert not repository.operation_states.is_in_progress(OperationKind(operation))

    async def test_held_checkout_request_is_dropped(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        gate = backend.hold("checkout")
        async with anyio.create_task_group() as tg:
            tg.start_soon(repository.checkout, "feature")
            await backend.wait_for_call("checkout")
            await repository.checkout("master")
            await repository.create_and_checkout("topic")
            assert backend.calls_to("checkout") == [("checkout", "feature")]
            gate.set()
        assert backend.head == "feature"

    async def test_different_classes_interleave(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        gate = backend.hold("push")
        async with anyio.create_task_group() as tg:
            tg.start_soon(repository.push, "master")
            await backend.wait_for_call("push")
            await repository.fetch()
            assert backend.calls_to("fetch") == [("fetch", "origin")]
            assert repository.operation_states.snapshot().is_in_progress(
                OperationKind.PUSH
            )
            gate.set()

    async def test_cancelled_caller_does_not_abort_push(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        backend.ahead = 1
        gate = backend.hold("push")
        async with anyio.create_task_group() as tg:
            tg.start_soon(repository.push, "master")
            await backend.wait_for_call("push")
            tg.cancel_scope.cancel()
            gate.set()

        assert backend.ahead == 0
        assert repository.generation == 1
        assert repository.operation_states.is_push_in_progress() is False
