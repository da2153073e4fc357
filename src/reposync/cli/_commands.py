# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: D415, FBT002
"""reposync CLI commands."""

from collections.abc import Awaitable, Callable
from typing import Annotated

import anyio
from cyclopts import App, Parameter
from rich.console import Console

from reposync.exceptions import (
    GitCommandError,
    GitNotFoundError,
    NoRemoteError,
    SyncOperationError,
)
from reposync.status_bar import DETACHED_SENTINEL, StatusBarController, StatusBarModel

from ._context import CLIContext
from ._shared import (
    ExitCode,
    RichConfirm,
    RichNotifier,
    exit_with_error,
    open_repository,
)

type ControllerAction = Callable[[StatusBarController], Awaitable[object]]


async def _no_action(_controller: StatusBarController) -> None:
    return None


def _run(action: ControllerAction, *, assume_yes: bool = False) -> StatusBarModel:
    """Run an action against the current repository and return the new model.

    Classified failures were already printed by the notifier; they map to
    SYNC_ERROR without a second message.
    """
    ctx = CLIContext.get_current()
    repository = open_repository(ctx, RichNotifier())
    controller = StatusBarController(
        repository, confirm=RichConfirm(assume_yes=assume_yes), logger=ctx.logger
    )

    async def _go() -> StatusBarModel:
        await action(controller)
        return await controller.refresh_model_data()

    try:
        return anyio.run(_go)
    except SyncOperationError:
        raise SystemExit(ExitCode.SYNC_ERROR) from None
    except (NoRemoteError, GitCommandError) as e:
        exit_with_error(str(e), ExitCode.SYNC_ERROR)
    except GitNotFoundError as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND)


def _print_summary(console: Console, model: StatusBarModel) -> None:
    state = model.state
    if state.branch is not None:
        if state.branch.is_detached:
            console.print(f"HEAD detached at [yellow]{state.branch.name}[/yellow]")
        else:
            console.print(f"On branch [bold cyan]{state.branch.name}[/bold cyan]")
    if model.push_pull is not None and model.push_pull.label:
        console.print(model.push_pull.label)
    console.print(f"{model.changed_files_label} changed")
    if state.merge_in_progress:
        console.print("[yellow]Merge in progress[/yellow]")


def status() -> None:
    """Show branch, sync state and changed files"""
    model = _run(_no_action)
    _print_summary(Console(), model)


def branches() -> None:
    """List local branches"""
    model = _run(_no_action)
    console = Console()
    menu = model.branch_menu
    if menu is None:
        return
    for option in menu.options:
        marker = "*" if option.value == menu.selected else " "
        if option.value == DETACHED_SENTINEL:
            console.print(f"{marker} [dim]({option.label})[/dim]")
        else:
            console.print(f"{marker} {option.label}")


def checkout(
    name: str,
    *,
    create: Annotated[
        bool,
        Parameter(name=["--create", "-b"], help="Create the branch first"),
    ] = False,
) -> None:
    """Check out a branch, optionally creating it"""

    async def action(controller: StatusBarController) -> None:
        if create:
            await controller.create_branch(name)
        else:
            await controller.select_branch(name)

    model = _run(action)
    console = Console()
    if model.state.branch is not None and model.state.branch.is_detached:
        console.print(f"HEAD is now detached at {model.state.branch.name}")
    else:
        console.print(f"Switched to branch [bold cyan]{name}[/bold cyan]")


def fetch() -> None:
    """Fetch from the current branch's remote"""
    model = _run(lambda controller: controller.fetch())
    _print_summary(Console(), model)


def pull() -> None:
    """Pull into the current branch"""
    model = _run(lambda controller: controller.pull())
    _print_summary(Console(), model)


def push(
    *,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], help="Overwrite the remote branch"),
    ] = False,
    yes: Annotated[
        bool,
        Parameter(name=["--yes", "-y"], help="Do not ask before force pushing"),
    ] = False,
) -> None:
    """Push the current branch, publishing it if it has no upstream"""
    accepted = True

    async def action(controller: StatusBarController) -> None:
        nonlocal accepted
        if force:
            accepted = await controller.force_push()
        else:
            await controller.push()

    model = _run(action, assume_yes=yes)
    console = Console()
    if not accepted:
        console.print("[dim]Force push cancelled[/dim]")
        return
    _print_summary(console, model)


def stage(*paths: Annotated[str, Parameter(help="Paths to stage")]) -> None:
    """Stage paths, including deletions"""
    model = _run(lambda controller: controller.repository.stage_files(paths))
    _print_summary(Console(), model)


def commit(
    *,
    message: Annotated[
        str,
        Parameter(name=["--message", "-m"], help="Commit message"),
    ],
    allow_empty: Annotated[
        bool,
        Parameter(name=["--allow-empty"], help="Allow a commit with no changes"),
    ] = False,
) -> None:
    """Commit staged changes"""
    model = _run(
        lambda controller: controller.repository.commit(message, allow_empty=allow_empty)
    )
    _print_summary(Console(), model)


config_app = App(name="config", help="Inspect reposync configuration.")


@config_app.command(name="show")
def _config_show(
    *,
    defaults: Annotated[
        bool,
        Parameter(name=["--defaults"], help="Include values equal to the defaults"),
    ] = True,
) -> None:
    """Print the merged configuration as TOML"""
    ctx = CLIContext.get_current()
    if ctx.config_error:
        exit_with_error(ctx.config_error, ExitCode.LOAD_ERROR)
    Console().print(ctx.config.to_toml(include_defaults=defaults), markup=False)


def register_commands(app: App) -> None:
    """Register every reposync command on app."""
    app.command(status, name="status")
    app.command(branches, name="branches")
    app.command(checkout, name="checkout")
    app.command(fetch, name="fetch")
    app.command(pull, name="pull")
    app.command(push, name="push")
    app.command(stage, name="stage")
    app.command(commit, name="commit")
    app.command(config_app)
