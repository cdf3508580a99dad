"""
Detection state for one monitoring session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

STATUS_FOCUSED = "Focused"
STATUS_LOOKING_AWAY = "Looking away"
STATUS_NO_FACE = "No face"
STATUS_MULTIPLE_FACES = "Multiple faces"


@dataclass(frozen=True)
class DetectionState:
    """
    Temporal state carried between evaluated frames.

    Immutable: the transition function in `detection.rules` returns a new
    instance together with the events it emitted.

    Attributes:
        face_count: Face count of the previous evaluated frame.
        last_face_seen_at: Unix time a face was last seen (session start initially).
        no_face_logged: An absence event was already emitted for the current absence.
        looking_away: Smoothed gaze offset is above threshold.
        looking_away_since: Unix time the current looking-away episode began.
        gaze_offset_ema: Exponential moving average of the horizontal eye offset.
        focus_away_logged: A focus-away event was already emitted for the current episode.
        last_object_event_at: Unix time object detection was last sampled.
        last_object_labels: Label set of the most recent object-detected event.
    """
    face_count: int = 0
    last_face_seen_at: float = 0.0
    no_face_logged: bool = False
    looking_away: bool = False
    looking_away_since: Optional[float] = None
    gaze_offset_ema: float = 0.0
    focus_away_logged: bool = False
    last_object_event_at: float = 0.0
    last_object_labels: Optional[FrozenSet[str]] = None

    @classmethod
    def initial(cls, started_at: float) -> "DetectionState":
        """State at the start of a monitoring session."""
        return cls(last_face_seen_at=started_at)

    @property
    def status_label(self) -> str:
        """Operator-facing status for the current state."""
        if self.face_count == 0:
            return STATUS_NO_FACE
        if self.face_count > 1:
            return STATUS_MULTIPLE_FACES
        return STATUS_LOOKING_AWAY if self.looking_away else STATUS_FOCUSED
