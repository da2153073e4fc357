"""Presentation-side collaborator protocols.

The synchronization engine reports classified failures through a Notifier
and asks a Confirm callable before destructive commands. Both are injected;
there is no global lookup.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Protocol for surfacing notifications to the user.

    Example:
        >>> class PrintNotifier:
        ...     def add_error(self, title: str, *, description: str) -> None:
        ...         print(f"error: {title}")
        ...
        ...     def add_warning(self, title: str, *, description: str) -> None:
        ...         print(f"warning: {title}")
    """

    def add_error(self, title: str, *, description: str) -> None:
        """Show an error notification."""
        ...

    def add_warning(self, title: str, *, description: str) -> None:
        """Show a warning notification."""
        ...


@runtime_checkable
class Confirm(Protocol):
    """Protocol for asking the user a yes/no question."""

    def __call__(self, message: str, *, detail: str) -> bool:
        """Return True if the user accepted.

        Args:
            message: Short question.
            detail: Longer explanation of the consequences.
        """
        ...
