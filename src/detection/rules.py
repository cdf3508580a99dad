"""
Transition rules for the detection state machine.

`advance` is a pure function: it takes the current DetectionState plus one
FrameObservation and returns the next state and the events emitted, in
emission order. Nothing here touches clocks, queues or logs, so every rule
can be driven frame by frame in tests without a camera.

Rules applied per evaluated frame, in order:
1. Face-count edges (face-found on 0 -> >=1, multiple-faces on <=1 -> >1).
2. Presence: reset absence tracking, or emit one absence event per episode.
3. Gaze (exactly one face): EMA-smoothed eye offset, one focus-away per episode.
4. Objects (when sampled): allow-listed labels, suppressed when unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence, Tuple

from models.config import DetectionConfig
from models.detection import FaceRegion, FrameObservation, ObjectDetection
from models.event import Event, EventType

from .gaze import gaze_offset_fraction, is_looking_away, offset_detail, smooth_offset
from .objects import filter_suspicious, format_labels, label_set
from .state import DetectionState

ABSENCE_DETAIL = "No face for >10s"


def object_sampling_due(
    state: DetectionState,
    now: float,
    config: DetectionConfig,
    recording: bool = False,
) -> bool:
    """Whether object detection should run for a frame arriving at `now`."""
    if not config.objects_enabled or recording:
        return False
    return now - state.last_object_event_at > config.object_interval


def advance(
    state: DetectionState,
    observation: FrameObservation,
    now: float,
    config: DetectionConfig,
    recording: bool = False,
) -> Tuple[DetectionState, List[Event]]:
    """Apply one frame's observation. Returns (next_state, emitted_events)."""
    events: List[Event] = []

    if observation.faces is not None:
        state = _apply_face_rules(state, observation.faces, now, config, events)

    if observation.objects is not None and object_sampling_due(state, now, config, recording):
        state = _apply_object_rule(state, observation.objects, now, config, events)

    return state, events


def _apply_face_rules(
    state: DetectionState,
    faces: Sequence[FaceRegion],
    now: float,
    config: DetectionConfig,
    events: List[Event],
) -> DetectionState:
    count = len(faces)
    prev_count = state.face_count

    if prev_count == 0 and count >= 1:
        events.append(Event.create(EventType.FACE_FOUND, now))
    if prev_count <= 1 and count > 1:
        events.append(Event.create(EventType.MULTIPLE_FACES, now))
    state = replace(state, face_count=count)

    if count == 0:
        elapsed = now - state.last_face_seen_at
        if elapsed > config.absence_seconds and not state.no_face_logged:
            events.append(Event.create(EventType.ABSENCE, now, ABSENCE_DETAIL))
            state = replace(state, no_face_logged=True)
        return state

    state = replace(state, last_face_seen_at=now, no_face_logged=False)
    if count == 1:
        state = _apply_gaze_rule(state, faces[0], now, config, events)
    return state


def _apply_gaze_rule(
    state: DetectionState,
    face: FaceRegion,
    now: float,
    config: DetectionConfig,
    events: List[Event],
) -> DetectionState:
    ema = smooth_offset(state.gaze_offset_ema, gaze_offset_fraction(face), config.gaze_smoothing)
    looking_away = is_looking_away(ema, config.gaze_threshold)
    state = replace(state, gaze_offset_ema=ema)

    if looking_away and not state.looking_away:
        state = replace(state, looking_away=True, looking_away_since=now)
    elif not looking_away and state.looking_away:
        # Falling edge ends the episode and re-arms the focus-away event.
        state = replace(state, looking_away=False, looking_away_since=None, focus_away_logged=False)

    if state.looking_away and state.looking_away_since is not None:
        if now - state.looking_away_since > config.focus_away_seconds and not state.focus_away_logged:
            events.append(Event.create(EventType.FOCUS_AWAY, now, offset_detail(ema)))
            state = replace(state, focus_away_logged=True)
    return state


def _apply_object_rule(
    state: DetectionState,
    objects: Sequence[ObjectDetection],
    now: float,
    config: DetectionConfig,
    events: List[Event],
) -> DetectionState:
    state = replace(state, last_object_event_at=now)
    suspicious = filter_suspicious(objects, config.object_classes, config.object_confidence)
    if not suspicious:
        return state

    labels = label_set(suspicious)
    if labels == state.last_object_labels:
        return state
    events.append(Event.create(EventType.OBJECT_DETECTED, now, format_labels(labels)))
    return replace(state, last_object_labels=labels)
