"""reposync command-line interface."""

from ._app import create_app, main
from ._context import CLIContext
from ._shared import ExitCode, RichConfirm, RichNotifier, exit_with_error

__all__ = [
    "CLIContext",
    "ExitCode",
    "RichConfirm",
    "RichNotifier",
    "create_app",
    "exit_with_error",
    "main",
]
