from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.models.jobs import ProgressSnapshot


class EventType(str, Enum):
    CONNECTED = "connected"
    QUEUED = "queued"
    PROGRESS = "progress"
    COMPLETED = "completed"
    FAILED = "failed"
    HEARTBEAT = "heartbeat"


JOB_EVENT_TYPES: frozenset[EventType] = frozenset(
    {EventType.QUEUED, EventType.PROGRESS, EventType.COMPLETED, EventType.FAILED}
)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One message on the progress stream.

    Job lifecycle events carry a snapshot; ``connected`` and ``heartbeat``
    carry only a timestamp.
    """

    type: EventType
    data: ProgressSnapshot | None = None
    timestamp: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value}
        if self.data is not None:
            payload["data"] = self.data.to_dict()
        if self.timestamp is not None:
            payload["timestamp"] = self.timestamp
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
