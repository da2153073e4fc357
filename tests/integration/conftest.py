import shutil
from pathlib import Path

import pytest
from git_sandbox import GitSandbox, create_sandbox, init_git_repo

_GIT_MISSING = shutil.which("git") is None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)
            if _GIT_MISSING:
                item.add_marker(pytest.mark.skip(reason="git is not installed"))


@pytest.fixture(autouse=True)
def git_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point git at an isolated global config and keep logs in tmp_path."""
    global_config = tmp_path / "gitconfig"
    global_config.write_text(
        "[user]\n"
        "\tname = Test User\n"
        "\temail = test@example.com\n"
        "[init]\n"
        "\tdefaultBranch = master\n"
        "[commit]\n"
        "\tgpgsign = false\n"
        "[advice]\n"
        "\tdetachedHead = false\n"
    )
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("REPOSYNC_LOGGING__FILE", str(tmp_path / "logs" / "cli.log"))
    monkeypatch.setattr(
        "reposync.config._discovery.get_user_config_path",
        lambda: tmp_path / "user-config.toml",
    )


@pytest.fixture
def lone_repo(tmp_path: Path) -> Path:
    """A repository with one commit and no remote."""
    path = tmp_path / "lone"
    init_git_repo(path)
    return path


@pytest.fixture
def sandbox(tmp_path: Path) -> GitSandbox:
    return create_sandbox(tmp_path)
