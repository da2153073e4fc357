"""Shared test fixtures for reposync tests."""

import pytest
from rich.console import Console

from reposync.backend import FakeGitBackend
from reposync.repository import Repository
from reposync.status_bar import FakeConfirm, FakeNotifier, StatusBarController


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def backend() -> FakeGitBackend:
    """Fake backend on master with an ``origin`` remote tracked by master."""
    return FakeGitBackend(
        branches=["feature", "master"],
        remotes=["origin"],
        upstream="origin/master",
    )


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def confirm() -> FakeConfirm:
    return FakeConfirm()


@pytest.fixture
def repository(backend: FakeGitBackend, notifier: FakeNotifier) -> Repository:
    return Repository(backend.root, backend, notifier=notifier)


@pytest.fixture
def controller(repository: Repository, confirm: FakeConfirm) -> StatusBarController:
    return StatusBarController(repository, confirm=confirm)


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
