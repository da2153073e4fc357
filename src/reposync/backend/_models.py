"""Backend result models."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GitResult:
    """Result of a successful git invocation.

    Attributes:
        argv: The git arguments (without the executable).
        stdout: Captured standard output.
        stderr: Captured standard error (git reports progress here).
    """

    argv: tuple[str, ...]
    stdout: str = ""
    stderr: str = ""

    @property
    def lines(self) -> list[str]:
        """Return non-empty stdout lines with surrounding whitespace removed."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]
