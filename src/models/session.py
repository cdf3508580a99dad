"""
Session model: one monitored candidate's append-only event log.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .event import Event


@dataclass
class Session:
    """
    A proctoring session held by the session store.

    The event log only grows. Callers read it through `events_snapshot()`,
    which returns a copy, so rendering can window it freely.

    Attributes:
        id: Opaque unique identifier.
        created_at: Unix timestamp of creation.
        candidate_name: Optional candidate display name.
    """
    id: str
    created_at: float = field(default_factory=time.time)
    candidate_name: Optional[str] = None
    _events: List[Event] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def append(self, events: Iterable[Event]) -> int:
        """Append events in order under the session lock. Returns number appended."""
        batch = list(events)
        with self._lock:
            self._events.extend(batch)
        return len(batch)

    def events_snapshot(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    @property
    def event_count(self) -> int:
        with self._lock:
            return len(self._events)

    def duration_minutes(self, now: Optional[float] = None) -> int:
        """Whole minutes since creation, rounded, never negative."""
        now = time.time() if now is None else now
        return max(0, round((now - self.created_at) / 60.0))
