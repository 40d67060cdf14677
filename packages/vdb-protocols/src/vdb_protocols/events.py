"""
Event recorder protocol.

Every significant reconcile transition is reported as an event triple
(type, reason, message) attached to the database object being reconciled.
"""

from enum import Enum
from typing import Any, Protocol, runtime_checkable


class EventType(str, Enum):
    """Severity of an emitted event."""

    NORMAL = "Normal"
    WARNING = "Warning"


@runtime_checkable
class EventRecorderProtocol(Protocol):
    """Protocol for recording events against a reconciled object."""

    def event(
        self, obj: Any, event_type: EventType, reason: str, message: str
    ) -> None:
        """
        Record one event.

        Args:
            obj: The object the event is about (the cluster spec).
            event_type: Normal or Warning.
            reason: Short CamelCase reason code.
            message: Human-readable message.
        """
        ...

    async def flush(self) -> None:
        """Wait until every event recorded so far has been delivered."""
        ...
