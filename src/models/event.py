"""
Event model for integrity-relevant occurrences.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .errors import MalformedInput


class EventType(str, Enum):
    """Closed set of event types emitted by the detection pipeline."""
    SESSION_START = "session-start"
    FACE_FOUND = "face-found"
    MULTIPLE_FACES = "multiple-faces"
    ABSENCE = "absence-10s"
    FOCUS_AWAY = "focus-away-5s"
    OBJECT_DETECTED = "object-detected"


def iso_timestamp(ts: float) -> str:
    """Format a Unix timestamp as ISO-8601 UTC with millisecond precision."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class Event:
    """
    A timestamped, typed record of a detected occurrence.

    Attributes:
        time: ISO-8601 timestamp string.
        type: Event type.
        detail: Optional human-readable detail.
    """
    time: str
    type: EventType
    detail: Optional[str] = None

    @classmethod
    def create(cls, event_type: EventType, ts: float, detail: Optional[str] = None) -> "Event":
        """Create an event stamped at Unix time `ts`."""
        return cls(time=iso_timestamp(ts), type=event_type, detail=detail)

    @classmethod
    def from_dict(cls, d: Any) -> "Event":
        """
        Adapter: Create from a wire dictionary.

        Raises:
            MalformedInput: If `time` or `type` is missing, not a string, or
                `type` is not a known event type.
        """
        if not isinstance(d, dict):
            raise MalformedInput(f"event must be an object, got {type(d).__name__}")
        time_value = d.get("time")
        type_value = d.get("type")
        if not isinstance(time_value, str):
            raise MalformedInput("event.time must be a string")
        if not isinstance(type_value, str):
            raise MalformedInput("event.type must be a string")
        # The type set is closed; unrecognised types are dropped, not stored.
        try:
            event_type = EventType(type_value)
        except ValueError:
            raise MalformedInput(f"unknown event type: {type_value}") from None
        detail = d.get("detail")
        return cls(
            time=time_value,
            type=event_type,
            detail=detail if isinstance(detail, str) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d: Dict[str, Any] = {"time": self.time, "type": self.type.value}
        if self.detail is not None:
            d["detail"] = self.detail
        return d
