"""In-progress bookkeeping for mutating operations.

Each operation class (push, pull, fetch, checkout) has one flag per
Repository. A request for a class whose flag is set is dropped by the caller;
classes are independent of each other.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import final

from reposync.exceptions import OperationInProgressError
from reposync.repository._models import (
    SYNC_OPERATIONS,
    OperationKind,
    OperationStatesSnapshot,
)


@final
class OperationStates:
    """Four independent in-progress flags.

    Flags change only through set_in_progress() or track(). Reads and writes
    are synchronous, so a check followed by track() with no await in between
    is atomic under cooperative scheduling.

    Example:
        >>> states = OperationStates()
        >>> with states.track(OperationKind.PUSH):
        ...     states.is_push_in_progress()
        True
        >>> states.is_push_in_progress()
        False
    """

    __slots__ = ("_did_update", "_flags")

    def __init__(self, did_update: Callable[[], None] | None = None) -> None:
        """Initialize with every flag cleared.

        Args:
            did_update: Called after any flag actually changes value.
        """
        self._flags: dict[OperationKind, bool] = dict.fromkeys(OperationKind, False)
        self._did_update = did_update

    # =========================================================================
    # Generic access
    # =========================================================================

    def is_in_progress(self, kind: OperationKind) -> bool:
        """Return True if the given operation class is in progress."""
        return self._flags[kind]

    def set_in_progress(self, kind: OperationKind, value: bool) -> None:  # noqa: FBT001
        """Set the flag for an operation class, notifying on change."""
        if self._flags[kind] == value:
            return
        self._flags[kind] = value
        if self._did_update is not None:
            self._did_update()

    def any_sync_in_progress(self) -> bool:
        """Return True if any of fetch, pull or push is in progress."""
        return any(self._flags[kind] for kind in SYNC_OPERATIONS)

    def snapshot(self) -> OperationStatesSnapshot:
        """Return an immutable copy of the current flags."""
        return OperationStatesSnapshot(
            push=self._flags[OperationKind.PUSH],
            pull=self._flags[OperationKind.PULL],
            fetch=self._flags[OperationKind.FETCH],
            checkout=self._flags[OperationKind.CHECKOUT],
        )

    @contextmanager
    def track(self, kind: OperationKind) -> Iterator[None]:
        """Hold the flag for an operation class for the duration of a block.

        The flag is cleared on every exit path, including exceptions and
        cancellation.

        Raises:
            OperationInProgressError: If the flag is already set.
        """
        if self._flags[kind]:
            msg = f"{kind} already in progress"
            raise OperationInProgressError(msg, operation=kind.value)
        self.set_in_progress(kind, True)
        try:
            yield
        finally:
            self.set_in_progress(kind, False)

    # =========================================================================
    # Per-class accessors
    # =========================================================================

    def is_push_in_progress(self) -> bool:
        """Return True if a push is in progress."""
        return self._flags[OperationKind.PUSH]

    def set_push_in_progress(self, value: bool) -> None:  # noqa: FBT001
        """Set the push flag."""
        self.set_in_progress(OperationKind.PUSH, value)

    def is_pull_in_progress(self) -> bool:
        """Return True if a pull is in progress."""
        return self._flags[OperationKind.PULL]

    def set_pull_in_progress(self, value: bool) -> None:  # noqa: FBT001
        """Set the pull flag."""
        self.set_in_progress(OperationKind.PULL, value)

    def is_fetch_in_progress(self) -> bool:
        """Return True if a fetch is in progress."""
        return self._flags[OperationKind.FETCH]

    def set_fetch_in_progress(self, value: bool) -> None:  # noqa: FBT001
        """Set the fetch flag."""
        self.set_in_progress(OperationKind.FETCH, value)

    def is_checkout_in_progress(self) -> bool:
        """Return True if a checkout is in progress."""
        return self._flags[OperationKind.CHECKOUT]

    def set_checkout_in_progress(self, value: bool) -> None:  # noqa: FBT001
        """Set the checkout flag."""
        self.set_in_progress(OperationKind.CHECKOUT, value)
