"""Tests for Repository queries and the generation-checked cache."""

from pathlib import Path

import anyio
import pytest

from reposync.backend import FakeGitBackend
from reposync.repository import (
    AheadBehind,
    BranchState,
    Repository,
    RepositoryState,
    parse_changed_paths,
)

# =============================================================================
# Porcelain parsing
# =============================================================================


class TestParseChangedPaths:
    def test_empty(self) -> None:
        assert parse_changed_paths("") == frozenset()

    def test_counts_each_path(self) -> None:
        porcelain = " M a.txt\0?? b.txt\0D  c.txt\0"
        assert parse_changed_paths(porcelain) == {"a.txt", "b.txt", "c.txt"}

    def test_rename_counts_destination_only(self) -> None:
        porcelain = "R  new.txt\0old.txt\0 M a.txt\0"
        assert parse_changed_paths(porcelain) == {"new.txt", "a.txt"}

    def test_paths_with_spaces(self) -> None:
        assert parse_changed_paths("?? my file.txt\0") == {"my file.txt"}


# =============================================================================
# Queries
# =============================================================================


@pytest.mark.anyio
class TestRepositoryBranchQueries:
    async def test_current_branch(self, repository: Repository) -> None:
        assert await repository.get_current_branch() == BranchState("master")

    async def test_detached_uses_describe_name(self, backend: FakeGitBackend) -> None:
        backend.detached = True
        backend.head = "master~2"
        repository = Repository(backend.root, backend)
        assert await repository.get_current_branch() == BranchState(
            "master~2", is_detached=True
        )

    async def test_detached_strips_ref_prefix(self, backend: FakeGitBackend) -> None:
        backend.detached = True
        backend.respond("describe", stdout="tags/v1.0~2\n")
        repository = Repository(backend.root, backend)
        branch = await repository.get_current_branch()
        assert branch is not None
        assert branch.name == "v1.0~2"

    async def test_detached_falls_back_to_short_hash(
        self, backend: FakeGitBackend
    ) -> None:
        backend.detached = True
        backend.fail("describe", stderr="fatal: cannot describe", exit_code=128)
        repository = Repository(backend.root, backend)
        assert await repository.get_current_branch() == BranchState(
            "abc1234", is_detached=True
        )

    async def test_branches_sorted(self, backend: FakeGitBackend) -> None:
        backend.branches = ["zeta", "alpha", "master"]
        repository = Repository(backend.root, backend)
        assert await repository.get_branches() == ("alpha", "master", "zeta")

    async def test_remotes(self, repository: Repository) -> None:
        assert await repository.get_remotes() == ("origin",)


@pytest.mark.anyio
class TestRepositoryAheadBehind:
    async def test_tracking(self, backend: FakeGitBackend) -> None:
        backend.ahead = 2
        backend.behind = 1
        repository = Repository(backend.root, backend)
        assert await repository.get_ahead_behind() == AheadBehind.tracking(
            2, 1, "origin/master"
        )

    async def test_no_remote(self, backend: FakeGitBackend) -> None:
        backend.remotes = []
        repository = Repository(backend.root, backend)
        assert await repository.get_ahead_behind() == AheadBehind.no_remote()

    async def test_no_upstream(self, backend: FakeGitBackend) -> None:
        backend.upstream = None
        repository = Repository(backend.root, backend)
        assert await repository.get_ahead_behind() == AheadBehind.no_upstream()

    async def test_detached(self, backend: FakeGitBackend) -> None:
        backend.detached = True
        repository = Repository(backend.root, backend)
        assert await repository.get_ahead_behind() == AheadBehind.detached()


@pytest.mark.anyio
class TestRepositoryWorkingTreeQueries:
    async def test_changed_file_count(self, backend: FakeGitBackend) -> None:
        backend.set_status((" M", "a.txt"), ("??", "b.txt"))
        repository = Repository(backend.root, backend)
        assert await repository.get_changed_file_count() == 2

    async def test_is_merging(self, backend: FakeGitBackend) -> None:
        backend.merging = True
        repository = Repository(backend.root, backend)
        assert await repository.is_merging() is True

    async def test_read_state(self, backend: FakeGitBackend) -> None:
        backend.ahead = 1
        backend.set_status((" M", "a.txt"))
        repository = Repository(backend.root, backend)
        state = await repository.read_state()
        assert state.present is True
        assert state.branch == BranchState("master")
        assert state.ahead_behind == AheadBehind.tracking(1, 0, "origin/master")
        assert state.changed_file_count == 1
        assert state.merge_in_progress is False
        assert state.generation == 0


# =============================================================================
# Absent repository
# =============================================================================


@pytest.mark.anyio
class TestAbsentRepository:
    async def test_queries_return_empty_values(self) -> None:
        repository = Repository(Path("/nowhere"))
        assert repository.present is False
        assert await repository.get_current_branch() is None
        assert await repository.get_branches() == ()
        assert await repository.get_remotes() == ()
        assert await repository.get_ahead_behind() == AheadBehind.unknown()
        assert await repository.get_changed_file_count() == 0
        assert await repository.is_merging() is False
        assert await repository.read_state() == RepositoryState.absent()

    async def test_operations_do_nothing(self) -> None:
        repository = Repository(Path("/nowhere"))
        await repository.checkout("master")
        await repository.fetch()
        await repository.pull()
        await repository.push("master")
        await repository.stage_files(["a.txt"])
        await repository.commit("message")
        assert repository.generation == 0

    def test_open_outside_worktree(self, tmp_path: Path) -> None:
        repository = Repository.open(tmp_path)
        assert repository.present is False
        assert repository.root == tmp_path.resolve()


# =============================================================================
# Cache
# =============================================================================


@pytest.mark.anyio
class TestRepositoryCache:
    async def test_queries_are_cached(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        _ = await repository.get_branches()
        _ = await repository.get_branches()
        assert len(backend.calls_to("for-each-ref")) == 1

    async def test_invalidate_drops_cache(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        _ = await repository.get_branches()
        backend.branches = ["master", "other"]
        repository.invalidate()
        assert await repository.get_branches() == ("master", "other")
        assert repository.generation == 1

    async def test_refresh_invalidates(self, repository: Repository) -> None:
        repository.refresh()
        assert repository.generation == 1

    async def test_did_update_fires_once_per_invalidation(
        self, repository: Repository
    ) -> None:
        fired: list[int] = []
        unsubscribe = repository.on_did_update(lambda: fired.append(repository.generation))
        repository.invalidate()
        repository.invalidate()
        unsubscribe()
        repository.invalidate()
        assert fired == [1, 2]

    async def test_load_straddling_invalidation_is_not_stored(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        gate = backend.hold("for-each-ref")
        results: list[tuple[str, ...]] = []

        async def load() -> None:
            results.append(await repository.get_branches())

        async with anyio.create_task_group() as tg:
            tg.start_soon(load)
            await backend.wait_for_call("for-each-ref")
            repository.invalidate()
            gate.set()

        assert results == [("feature", "master")]
        _ = await repository.get_branches()
        assert len(backend.calls_to("for-each-ref")) == 2

    async def test_read_state_retries_until_one_generation(
        self, backend: FakeGitBackend, repository: Repository
    ) -> None:
        gate = backend.hold("status")
        states: list[RepositoryState] = []

        async def read() -> None:
            states.append(await repository.read_state())

        async with anyio.create_task_group() as tg:
            tg.start_soon(read)
            await backend.wait_for_call("status")
            backend.set_status((" M", "late.txt"))
            repository.invalidate()
            gate.set()

        assert states[0].generation == repository.generation == 1
        assert states[0].changed_file_count == 1
        assert len(backend.calls_to("status")) == 2
