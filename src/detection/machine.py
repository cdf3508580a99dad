"""
Detection state machine: owns one monitoring session's detection state.

Wraps the pure rules in `detection.rules` with the side effects a running
monitor needs: a lock serializing frame passes, an event sink (normally
`EventQueue.push`), an in-memory display log and operator notices.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from models.config import DetectionConfig
from models.detection import FrameObservation
from models.event import Event, EventType
from reporting.csv_report import render_rows_csv

from .rules import advance, object_sampling_due
from .state import DetectionState

EventSink = Callable[[Event], None]

# Operator notices per event type (stand-in for on-screen toasts).
EVENT_NOTICES: Dict[EventType, Tuple[int, str]] = {
    EventType.FACE_FOUND: (logging.INFO, "Face detected"),
    EventType.MULTIPLE_FACES: (logging.WARNING, "Multiple faces detected"),
    EventType.ABSENCE: (logging.ERROR, "No face for >10s"),
    EventType.FOCUS_AWAY: (logging.WARNING, "Looking away >5s"),
    EventType.OBJECT_DETECTED: (logging.WARNING, "Suspicious object detected"),
}


@dataclass(frozen=True)
class DisplayEntry:
    """An emitted event as shown to the operator, with a local wall-clock time."""
    local_time: str
    event: Event

    def as_row(self) -> Tuple[str, str, str]:
        return (self.local_time, self.event.type.value, self.event.detail or "")


class DetectionStateMachine:
    """
    Turns per-frame inference results into debounced events.

    Example:
        machine = DetectionStateMachine(cfg.detection, sink=queue.push)
        events = machine.process(FrameObservation(faces=faces))
    """

    def __init__(
        self,
        config: DetectionConfig,
        sink: Optional[EventSink] = None,
        clock: Callable[[], float] = time.time,
        started_at: Optional[float] = None,
    ):
        self._config = config
        self._sink = sink
        self._clock = clock
        self._lock = threading.Lock()
        self._state = DetectionState.initial(clock() if started_at is None else started_at)
        self._display_log: List[DisplayEntry] = []
        self.recording = False

    @property
    def config(self) -> DetectionConfig:
        return self._config

    @property
    def state(self) -> DetectionState:
        with self._lock:
            return self._state

    @property
    def status_label(self) -> str:
        return self.state.status_label

    def object_sampling_due(self, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        with self._lock:
            return object_sampling_due(self._state, now, self._config, self.recording)

    def process(self, observation: FrameObservation, now: Optional[float] = None) -> List[Event]:
        """Evaluate one frame. Returns the events emitted for it."""
        now = self._clock() if now is None else now
        with self._lock:
            self._state, events = advance(self._state, observation, now, self._config, recording=self.recording)
            for event in events:
                self._publish(event, now)
        return events

    def _publish(self, event: Event, now: float) -> None:
        local_time = datetime.fromtimestamp(now).strftime("%H:%M:%S")
        self._display_log.append(DisplayEntry(local_time=local_time, event=event))

        level, message = EVENT_NOTICES.get(event.type, (logging.INFO, event.type.value))
        if event.detail:
            message = f"{message} ({event.detail})"
        logging.log(level, message)

        if self._sink is not None:
            try:
                self._sink(event)
            except Exception as e:
                logging.error(f"Failed to enqueue {event.type.value} event: {e}")

    def display_log(self) -> List[DisplayEntry]:
        with self._lock:
            return list(self._display_log)

    def display_log_csv(self) -> bytes:
        """Export the display log as CSV (time,type,detail)."""
        return render_rows_csv(entry.as_row() for entry in self.display_log())
