"""Shared CLI utilities for commands.

- Standardized exit codes
- Rich-backed Notifier and Confirm implementations
- Repository construction from the CLI context
"""

from enum import IntEnum
from typing import TYPE_CHECKING, Never, final

from rich.console import Console
from rich.prompt import Confirm

from reposync.repository import Repository

if TYPE_CHECKING:
    from reposync.cli._context import CLIContext


class ExitCode(IntEnum):
    """Standard exit codes for reposync CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5
    SYNC_ERROR = 6


def get_error_console() -> Console:
    """Get a Rich console writing to stderr."""
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(code)


@final
class RichNotifier:
    """Notifier printing errors in red and warnings in yellow."""

    __slots__ = ("console",)

    def __init__(self, console: Console | None = None) -> None:
        """Initialize with the console to print to (stderr by default)."""
        self.console = console or get_error_console()

    def add_error(self, title: str, *, description: str) -> None:
        """Print an error notification."""
        self.console.print(f"[bold red]{title}[/bold red]")
        self.console.print(description, style="red", markup=False)

    def add_warning(self, title: str, *, description: str) -> None:
        """Print a warning notification."""
        self.console.print(f"[bold yellow]{title}[/bold yellow]")
        self.console.print(description, style="yellow", markup=False)


@final
class RichConfirm:
    """Confirm that prompts on the terminal unless answers are assumed."""

    __slots__ = ("assume_yes", "console")

    def __init__(self, *, assume_yes: bool = False, console: Console | None = None) -> None:
        """Initialize the prompt.

        Args:
            assume_yes: Accept every question without prompting.
            console: Console to prompt on.
        """
        self.assume_yes = assume_yes
        self.console = console

    def __call__(self, message: str, *, detail: str) -> bool:
        """Ask message, showing detail first."""
        if self.assume_yes:
            return True
        return Confirm.ask(f"{detail}\n{message}", console=self.console, default=False)


def open_repository(ctx: "CLIContext", notifier: RichNotifier) -> Repository:
    """Open the repository the CLI context points at.

    Exits with NOT_FOUND when the directory is not inside a working tree.
    """
    sync = ctx.config.sync
    repository = Repository.open(
        ctx.repo_path,
        git_executable=sync.git_executable,
        notifier=notifier,
        default_remote=sync.default_remote,
        prune_on_fetch=sync.prune_on_fetch,
        logger=ctx.logger,
    )
    if not repository.present:
        exit_with_error(
            f"Not inside a git working tree: {repository.root}", ExitCode.NOT_FOUND
        )
    return repository
