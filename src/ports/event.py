"""Event port definition (DTO)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

__all__ = ["DEFAULT_EVENT_SOURCE", "DEFAULT_EVENT_TYPE", "Event", "EventData"]

DEFAULT_EVENT_TYPE = "dev.heartbeat.sample"
DEFAULT_EVENT_SOURCE = "heartbeat.dev/heartbeat-source"
SPEC_VERSION = "1.0"


@dataclass(slots=True, frozen=True)
class EventData:
    """Payload carried by each heartbeat event.

    Attributes:
        sequence: Position of the event in this run, starting at 0.
        heartbeat: Configured interval, as a duration string.
        message: Rendered message template; empty if rendering failed.
    """

    sequence: int
    heartbeat: str
    message: str


@dataclass(slots=True, frozen=True)
class Event:
    """Immutable event produced once per tick.

    Attributes:
        type: Event type identifier.
        source: Event source identifier.
        data: Heartbeat payload.
        id: Unique event id.
        time: Creation time (UTC).
    """

    type: str
    source: str
    data: EventData
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_cloudevent(self) -> dict[str, Any]:
        """Encode as a CloudEvents structured-mode JSON object.

        Returns:
            JSON-serializable dictionary.
        """
        return {
            "specversion": SPEC_VERSION,
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "time": self.time.isoformat(),
            "datacontenttype": "application/json",
            "data": {
                "sequence": self.data.sequence,
                "heartbeat": self.data.heartbeat,
                "message": self.data.message,
            },
        }
