"""
Diagnostic Sinks

Where diagnostic events end up besides the local structured log.
The engine holds no persistent state; persisting events is a sink's
job, and the engine only ever appends.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from account_aggregator.models.diagnostics import DiagnosticEvent, DiagnosticEventType


class DiagnosticsSinkInterface(ABC):
    """
    Abstract append-only destination for diagnostic events.

    Implementations may write to a database, a queue or memory.
    """

    @abstractmethod
    async def append_event(self, event: DiagnosticEvent) -> bool:
        """
        Append one event.

        Returns:
            True if the event was stored
        """
        pass


class InMemoryDiagnosticsSink(DiagnosticsSinkInterface):
    """
    Keeps events in a list.

    Used by tests, and by the presentation layer to decide whether to
    show the "some sources were unavailable" indicator.
    """

    def __init__(self):
        self._events: list[DiagnosticEvent] = []

    async def append_event(self, event: DiagnosticEvent) -> bool:
        self._events.append(event)
        return True

    @property
    def events(self) -> list[DiagnosticEvent]:
        return list(self._events)

    def events_of_type(
        self,
        event_type: DiagnosticEventType,
        correlation_id: Optional[UUID] = None,
    ) -> list[DiagnosticEvent]:
        return [
            event for event in self._events
            if event.event_type == event_type
            and (correlation_id is None or event.correlation_id == correlation_id)
        ]

    def clear(self) -> None:
        self._events.clear()
