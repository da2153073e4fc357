"""The command-line interface for reposync."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from reposync.config import safe_load_config
from reposync.utils import create_cli_logger

from ._commands import register_commands
from ._context import CLIContext

APP_HELP = "Keep a git working tree in sync with its remote."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Build the reposync application.

    The meta app parses global options, loads configuration, creates the
    CLI logger and publishes a CLIContext before dispatching to a command.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="reposync",
        help=APP_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        verbose: Annotated[bool, Parameter(help="Log at debug level")] = False,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        repo: Annotated[
            Path | None,
            Parameter(name="--repo", help="Directory inside the working tree"),
        ] = None,
    ) -> None:
        """Run a reposync command with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            verbose: Log at debug level regardless of configuration.
            config: Explicit path to config file.
            repo: Directory to discover the repository from.
        """
        cli_overrides: dict[str, object] | None = None
        if verbose:
            cli_overrides = {"logging": {"level": "debug"}}

        loaded_config, config_error = safe_load_config(
            config_path=config,
            project_root=repo,
            cli_overrides=cli_overrides,
        )

        cli_logger = create_cli_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
            command=tokens[0] if tokens else "",
        )

        ctx = CLIContext(
            config=loaded_config,
            verbose=verbose,
            repo_path=repo,
            config_error=config_error,
            logger=cli_logger,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `reposync` CLI."""
    app = create_app()
    app.meta()


if __name__ == "__main__":
    main()
