"""Recording fakes for the presentation-side protocols."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True, slots=True)
class Notification:
    """A recorded notification.

    Attributes:
        level: ``"error"`` or ``"warning"``.
        title: Short title.
        description: Longer description.
    """

    level: Literal["error", "warning"]
    title: str
    description: str


@dataclass(slots=True)
class FakeNotifier:
    """Notifier that records every notification in order."""

    notifications: list[Notification] = field(default_factory=list)

    def add_error(self, title: str, *, description: str) -> None:
        """Record an error notification."""
        self.notifications.append(Notification("error", title, description))

    def add_warning(self, title: str, *, description: str) -> None:
        """Record a warning notification."""
        self.notifications.append(Notification("warning", title, description))

    @property
    def errors(self) -> list[Notification]:
        """Return recorded error notifications."""
        return [n for n in self.notifications if n.level == "error"]

    @property
    def warnings(self) -> list[Notification]:
        """Return recorded warning notifications."""
        return [n for n in self.notifications if n.level == "warning"]


@dataclass(slots=True)
class FakeConfirm:
    """Confirm callable that returns a fixed answer and records questions.

    Attributes:
        answer: Value returned for every question.
        questions: ``(message, detail)`` pairs in the order asked.
    """

    answer: bool = True
    questions: list[tuple[str, str]] = field(default_factory=list)

    def __call__(self, message: str, *, detail: str) -> bool:
        """Record the question and return the fixed answer."""
        self.questions.append((message, detail))
        return self.answer
