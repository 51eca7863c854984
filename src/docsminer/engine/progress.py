"""Progress reporters: where crawl status events go."""

from typing import Any, Callable

from docsminer.core.interfaces import ProgressReporter
from docsminer.core.models import ProgressEvent


class NullReporter(ProgressReporter):
    """Discard every event."""

    def emit(self, event: ProgressEvent) -> None:
        pass


class CallbackReporter(ProgressReporter):
    """Forward events as wire messages to a callback.

    The callback receives the dict form of each event, e.g.
    ``{"type": "status", "message": "..."}``.
    """

    def __init__(self, callback: Callable[[dict[str, Any]], Any]) -> None:
        self._callback = callback

    def emit(self, event: ProgressEvent) -> None:
        self._callback(event.to_message())


class RecordingReporter(ProgressReporter):
    """Keep every event in memory, in order."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def messages(self) -> list[str]:
        return [getattr(event, "message", "") for event in self.events]
