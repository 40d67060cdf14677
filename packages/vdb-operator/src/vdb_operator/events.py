"""
Event reasons and recorders.

Reason codes are stable CamelCase identifiers attached to every event the
reconcilers emit. Two recorders are provided:
- MemoryEventRecorder: keeps events in a list and logs them
- KubernetesEventRecorder: creates core/v1 Events against the VerticaDB
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from kubernetes import client
from kubernetes.client.rest import ApiException

from vdb_protocols import EventType

logger = logging.getLogger(__name__)

# Reason codes
CREATE_DB_START = "CreateDBStart"
CREATE_DB_SUCCEEDED = "CreateDBSucceeded"
CREATE_DB_FAILED = "CreateDBFailed"
REVIVE_DB_START = "ReviveDBStart"
REVIVE_DB_SUCCEEDED = "ReviveDBSucceeded"
REVIVE_DB_FAILED = "ReviveDBFailed"
REVIVE_DB_NOT_FOUND = "ReviveDBNotFound"
S3_ENDPOINT_ISSUE = "S3EndpointIssue"
S3_BUCKET_DOES_NOT_EXIST = "S3BucketDoesNotExist"
COMMUNAL_PATH_IS_NOT_EMPTY = "CommunalPathIsNotEmpty"

COMPONENT = "verticadb-operator"


@dataclass
class Event:
    """One recorded event."""

    event_type: EventType
    reason: str
    message: str
    object_name: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _object_name(obj: Any) -> str:
    metadata = getattr(obj, "metadata", None)
    if metadata is None:
        return ""
    return f"{metadata.namespace}/{metadata.name}"


class MemoryEventRecorder:
    """
    Event recorder that keeps events in memory.

    Every event is also written to the log (warning events at WARNING
    level), so this recorder doubles as the recorder for local runs.
    """

    def __init__(self) -> None:
        self.events: list[Event] = []

    def event(self, obj: Any, event_type: EventType, reason: str, message: str) -> None:
        ev = Event(event_type, reason, message, object_name=_object_name(obj))
        self.events.append(ev)
        level = logging.WARNING if event_type == EventType.WARNING else logging.INFO
        logger.log(level, f"[{ev.object_name}] {reason}: {message}")

    async def flush(self) -> None:
        pass

    def find(self, reason: str) -> list[Event]:
        return [e for e in self.events if e.reason == reason]


class KubernetesEventRecorder:
    """Event recorder that creates core/v1 Events.

    The API call is blocking, so when called from a running event loop it
    is handed to the default executor and event() returns immediately;
    flush() waits for the outstanding calls.

    Failures to create an event are logged and otherwise ignored: events
    are informational and must not change the outcome of a reconcile.
    """

    def __init__(self, core_api: client.CoreV1Api | None = None):
        self._core_api = core_api or client.CoreV1Api()
        self._pending: set[asyncio.Future] = set()

    def event(self, obj: Any, event_type: EventType, reason: str, message: str) -> None:
        now = datetime.now(timezone.utc)
        meta = obj.metadata
        body = client.CoreV1Event(
            metadata=client.V1ObjectMeta(
                name=f"{meta.name}.{uuid4().hex[:16]}",
                namespace=meta.namespace,
            ),
            involved_object=client.V1ObjectReference(
                api_version=obj.api_version,
                kind=obj.kind,
                name=meta.name,
                namespace=meta.namespace,
                uid=meta.uid or None,
            ),
            type=event_type.value,
            reason=reason,
            message=message,
            source=client.V1EventSource(component=COMPONENT),
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._create(meta, reason, body)
            return
        fut = loop.run_in_executor(None, self._create, meta, reason, body)
        self._pending.add(fut)
        fut.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending)

    def _create(self, meta: Any, reason: str, body: client.CoreV1Event) -> None:
        try:
            self._core_api.create_namespaced_event(meta.namespace, body)
        except ApiException as e:
            logger.warning(f"Failed to record event {reason} for {meta.namespace}/{meta.name}: {e.reason}")
