# ruff: noqa: TC003  # Path needed at runtime for attribute annotations
"""Subprocess git backend.

Runs the git executable with anyio so that callers suspend, rather than
block, while git works.
"""

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final, final

import anyio

from reposync.backend._models import GitResult
from reposync.exceptions import GitCommandError, GitNotFoundError

# Keep git output in English so error classification stays stable, and never
# block on a credential prompt.
_BASE_ENV: Final = {
    "LC_ALL": "C",
    "LANG": "C",
    "GIT_TERMINAL_PROMPT": "0",
}


@final
class GitCliBackend:
    """Runs git as a subprocess in a fixed working tree.

    Attributes:
        root: Working-tree directory passed as the subprocess cwd.
        git_executable: Name or path of the git binary.
    """

    __slots__ = ("_env", "git_executable", "root")

    def __init__(
        self,
        root: Path,
        *,
        git_executable: str = "git",
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            root: Working-tree directory.
            git_executable: Name or path of the git binary.
            env: Extra environment variables layered over the process
                environment and the locale overrides.
        """
        self.root = root
        self.git_executable = git_executable
        self._env = {**os.environ, **_BASE_ENV, **(env or {})}

    async def execute(self, argv: Sequence[str]) -> GitResult:
        """Run git and capture its output.

        Args:
            argv: Arguments after the git executable.

        Returns:
            GitResult with decoded stdout and stderr.

        Raises:
            GitCommandError: If git exits with a non-zero status.
            GitNotFoundError: If the git executable cannot be started.
        """
        args = tuple(argv)
        try:
            completed = await anyio.run_process(
                [self.git_executable, *args],
                cwd=self.root,
                env=self._env,
                check=False,
            )
        except FileNotFoundError as e:
            msg = f"git executable not found: {self.git_executable}"
            raise GitNotFoundError(msg, executable=self.git_executable) from e

        stdout = completed.stdout.decode("utf-8", errors="replace")
        stderr = completed.stderr.decode("utf-8", errors="replace")

        if completed.returncode != 0:
            detail = stderr.strip() or stdout.strip()
            msg = f"git {' '.join(args)} failed with exit code {completed.returncode}"
            if detail:
                msg = f"{msg}: {detail}"
            raise GitCommandError(
                msg,
                argv=args,
                exit_code=completed.returncode,
                stdout=stdout,
                stderr=stderr,
            )

        return GitResult(argv=args, stdout=stdout, stderr=stderr)
