"""Helpers for building throwaway git repositories in tests."""

import subprocess
from dataclasses import dataclass
from pathlib import Path


def git(cwd: Path, *args: str) -> str:
    """Run git in cwd and return its stdout."""
    completed = subprocess.run(  # noqa: S603
        ["git", *args],  # noqa: S607
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout


def commit_file(repo: Path, name: str, content: str, message: str = "") -> None:
    """Write a file and commit it."""
    (repo / name).write_text(content)
    _ = git(repo, "add", "--", name)
    _ = git(repo, "commit", "-q", "-m", message or f"Update {name}")


def init_git_repo(path: Path) -> None:
    """Initialize a repository on master with one commit."""
    path.mkdir(parents=True, exist_ok=True)
    _ = git(path, "init", "-q", "-b", "master")
    commit_file(path, "README.md", "# Sandbox\n", "Initial commit")


@dataclass(frozen=True, slots=True)
class GitSandbox:
    """A working clone, its bare remote and a second clone of the remote.

    Attributes:
        work: Working tree under test, on master tracking origin/master.
        remote: Bare repository used as origin.
        other: Another clone used to push competing commits.
    """

    work: Path
    remote: Path
    other: Path


def create_sandbox(base: Path) -> GitSandbox:
    """Create a GitSandbox under base."""
    work = base / "work"
    remote = base / "remote.git"
    other = base / "other"

    init_git_repo(work)
    commit_file(work, "a.txt", "base\n", "Add a.txt")
    _ = git(base, "init", "-q", "--bare", "-b", "master", str(remote))
    _ = git(work, "remote", "add", "origin", str(remote))
    _ = git(work, "push", "-q", "-u", "origin", "master")
    _ = git(base, "clone", "-q", str(remote), str(other))

    return GitSandbox(work=work, remote=remote, other=other)
