# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake git backend for testing.

This module provides a FakeGitBackend class that implements GitBackend
without spawning git. It answers the queries the synchronization engine
issues from in-memory state, records every call, and lets tests script
failures or hold calls pending.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import anyio

from reposync.backend._models import GitResult
from reposync.exceptions import GitCommandError


@dataclass(slots=True)
class _Rule:
    prefix: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int


@dataclass(slots=True)
class FakeGitBackend:
    """Fake git backend for testing.

    The fake keeps repository state in plain attributes that tests may set
    directly:
    - head/detached describe the current HEAD
    - branches lists local branches
    - remotes, upstream, ahead and behind describe the tracking setup
    - merging reports whether MERGE_HEAD exists
    - status_output is returned verbatim for porcelain status

    Scripted rules registered with respond()/fail() take precedence over the
    state-derived answers. Successful checkout, push, pull and commit calls
    update the state the way git would.

    Example:
        >>> backend = FakeGitBackend(remotes=["origin"], upstream="origin/master")
        >>> backend.behind = 2
        >>> backend.fail("push", stderr="! [rejected] master -> master (fetch first)")
    """

    root: Path = field(default_factory=lambda: Path("/fake/project"))
    head: str = "master"
    detached: bool = False
    branches: list[str] = field(default_factory=lambda: ["master"])
    remotes: list[str] = field(default_factory=list)
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    merging: bool = False
    status_output: str = ""
    calls: list[tuple[str, ...]] = field(default_factory=list)
    _rules: list[_Rule] = field(default_factory=list)
    _gates: list[tuple[tuple[str, ...], anyio.Event]] = field(default_factory=list)

    # =========================================================================
    # GitBackend Protocol
    # =========================================================================

    async def execute(self, argv: Sequence[str]) -> GitResult:
        """Record the call, wait on any matching gate, then answer it.

        Args:
            argv: Arguments after the git executable.

        Returns:
            GitResult built from a scripted rule or the fake state.

        Raises:
            GitCommandError: If a rule or the fake state says the call fails.
        """
        args = tuple(argv)
        self.calls.append(args)

        for prefix, gate in self._gates:
            if args[: len(prefix)] == prefix:
                await gate.wait()
                break

        rule = self._find_rule(args)
        if rule is not None:
            return self._result(args, rule.stdout, rule.stderr, rule.exit_code)

        stdout, exit_code = self._answer(args)
        return self._result(args, stdout, "", exit_code)

    # =========================================================================
    # Scripting Helpers
    # =========================================================================

    def respond(self, *prefix: str, stdout: str = "", stderr: str = "") -> None:
        """Make calls starting with prefix succeed with the given output."""
        self._rules.append(_Rule(prefix, stdout, stderr, 0))

    def fail(
        self,
        *prefix: str,
        stderr: str = "",
        stdout: str = "",
        exit_code: int = 1,
    ) -> None:
        """Make calls starting with prefix fail with the given output."""
        self._rules.append(_Rule(prefix, stdout, stderr, exit_code))

    def clear_rules(self) -> None:
        """Drop all scripted rules so answers come from state again."""
        self._rules.clear()

    def hold(self, *prefix: str) -> anyio.Event:
        """Hold calls starting with prefix until the returned event is set.

        Must be called from inside a running event loop.
        """
        gate = anyio.Event()
        self._gates.append((prefix, gate))
        return gate

    def calls_to(self, *prefix: str) -> list[tuple[str, ...]]:
        """Return recorded calls that start with prefix."""
        return [call for call in self.calls if call[: len(prefix)] == prefix]

    async def wait_for_call(self, *prefix: str, timeout: float = 1.0) -> None:
        """Wait until at least one call starting with prefix was recorded."""
        with anyio.fail_after(timeout):
            while not self.calls_to(*prefix):
                await anyio.sleep(0)

    def set_status(self, *entries: tuple[str, str]) -> None:
        """Set porcelain status from ``(xy, path)`` pairs."""
        self.status_output = "".join(f"{xy} {path}\0" for xy, path in entries)

    # =========================================================================
    # Internals
    # =========================================================================

    def _find_rule(self, args: tuple[str, ...]) -> _Rule | None:
        for rule in reversed(self._rules):
            if args[: len(rule.prefix)] == rule.prefix:
                return rule
        return None

    def _result(
        self, args: tuple[str, ...], stdout: str, stderr: str, exit_code: int
    ) -> GitResult:
        if exit_code != 0:
            msg = f"git {' '.join(args)} failed with exit code {exit_code}"
            raise GitCommandError(
                msg, argv=args, exit_code=exit_code, stdout=stdout, stderr=stderr
            )
        return GitResult(argv=args, stdout=stdout, stderr=stderr)

    def _answer(self, args: tuple[str, ...]) -> tuple[str, int]:  # noqa: C901, PLR0911, PLR0912
        """Derive output and exit code for a call from the fake state."""
        command, rest = args[0], args[1:]

        if command == "symbolic-ref":
            return ("", 1) if self.detached else (f"{self.head}\n", 0)
        if command == "describe":
            return f"{self.head}\n", 0
        if command == "rev-parse":
            if "MERGE_HEAD" in rest:
                return ("MERGE_HEAD\n", 0) if self.merging else ("", 1)
            if "@{upstream}" in rest:
                return (f"{self.upstream}\n", 0) if self.upstream else ("", 128)
            return "abc1234\n", 0
        if command == "rev-list":
            if self.upstream is None:
                return "", 128
            return f"{self.behind}\t{self.ahead}\n", 0
        if command == "for-each-ref":
            return "".join(f"{name}\n" for name in self.branches), 0
        if command == "show-ref":
            name = rest[-1].removeprefix("refs/heads/")
            return ("", 0) if name in self.branches else ("", 1)
        if command == "remote":
            return "".join(f"{name}\n" for name in self.remotes), 0
        if command == "config":
            key = rest[-1]
            if key.startswith("branch.") and key.endswith(".remote") and self.upstream:
                return f"{self.upstream.split('/', 1)[0]}\n", 0
            return "", 1
        if command == "status":
            return self.status_output, 0
        if command == "checkout":
            self._apply_checkout(rest)
        elif command == "push":
            self._apply_push(rest)
        elif command == "pull":
            self.behind = 0
            self.merging = False
        elif command == "commit" and self.upstream is not None:
            self.ahead += 1
        return "", 0

    def _apply_checkout(self, rest: tuple[str, ...]) -> None:
        if rest[0] == "-b":
            name = rest[1]
            self.branches = sorted([*self.branches, name])
            self.head = name
            self.detached = False
            self.upstream = None
            return
        target = rest[0]
        self.head = target
        self.detached = target not in self.branches

    def _apply_push(self, rest: tuple[str, ...]) -> None:
        positional = [arg for arg in rest if not arg.startswith("-")]
        if "--set-upstream" in rest and len(positional) >= 2:  # noqa: PLR2004
            remote, branch = positional[0], positional[1]
            self.upstream = f"{remote}/{branch}"
        self.ahead = 0
