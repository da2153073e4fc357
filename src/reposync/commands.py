"""Named command dispatch.

Presentation layers bind keystrokes or menu items to command names; the
registry maps names to async handlers.
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, final

from reposync.exceptions import UnknownCommandError

if TYPE_CHECKING:
    from reposync.status_bar import StatusBarController

type CommandHandler = Callable[[], Awaitable[object]]

FETCH_COMMAND = "reposync:fetch"
PULL_COMMAND = "reposync:pull"
PUSH_COMMAND = "reposync:push"
FORCE_PUSH_COMMAND = "reposync:force-push"


@final
class CommandRegistry:
    """Maps command names to async handlers."""

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._handlers: dict[str, CommandHandler] = {}

    def register(self, name: str, handler: CommandHandler) -> Callable[[], None]:
        """Register a handler, replacing any previous one for name.

        Returns:
            A function that removes this registration.
        """
        self._handlers[name] = handler

        def dispose() -> None:
            if self._handlers.get(name) is handler:
                del self._handlers[name]

        return dispose

    def names(self) -> tuple[str, ...]:
        """Return registered command names, sorted."""
        return tuple(sorted(self._handlers))

    async def dispatch(self, name: str) -> None:
        """Run the handler registered for name.

        Raises:
            UnknownCommandError: If nothing is registered under name.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownCommandError(name)
        _ = await handler()


def register_sync_commands(
    registry: CommandRegistry, controller: "StatusBarController"
) -> Callable[[], None]:
    """Register fetch, pull, push and force-push for a status bar controller.

    Force push asks the controller's Confirm once and only pushes on
    acceptance.

    Returns:
        A function that removes all four registrations.
    """
    disposers = [
        registry.register(FETCH_COMMAND, controller.fetch),
        registry.register(PULL_COMMAND, controller.pull),
        registry.register(PUSH_COMMAND, controller.push),
        registry.register(FORCE_PUSH_COMMAND, controller.force_push),
    ]

    def dispose_all() -> None:
        for dispose in disposers:
            dispose()

    return dispose_all
