"""
Smoke tests for typed models and adapters.
"""

import time

import numpy as np
import pytest

from models.detection import BoundingBox, FaceRegion, FrameObservation
from models.errors import MalformedInput
from models.event import Event, EventType, iso_timestamp
from models.frame import FrameData
from models.session import Session


class TestBoundingBox:
    def test_properties(self):
        bbox = BoundingBox(x1=100, y1=100, x2=200, y2=150)
        assert bbox.width == 100
        assert bbox.height == 50
        assert bbox.center == (150.0, 125.0)

    def test_as_int_tuple(self):
        bbox = BoundingBox(x1=10.5, y1=20.5, x2=30.5, y2=40.5)
        assert bbox.as_int_tuple() == (10, 20, 30, 40)

    def test_from_xywh(self):
        bbox = BoundingBox.from_xywh(x=100, y=100, w=50, h=30)
        assert (bbox.x2, bbox.y2) == (150, 130)


class TestFaceRegion:
    def test_eye_midpoint_from_landmarks(self):
        face = FaceRegion(
            bbox=BoundingBox(0, 0, 100, 100),
            landmarks=((60.0, 40.0), (80.0, 40.0), (70.0, 60.0)),
        )
        assert face.eye_midpoint_x == 70.0

    def test_eye_midpoint_falls_back_to_centre(self):
        face = FaceRegion(bbox=BoundingBox(0, 0, 100, 100))
        assert face.eye_midpoint_x == 50.0


class TestFrameObservation:
    def test_face_count(self):
        assert FrameObservation().face_count is None
        assert FrameObservation(faces=[]).face_count == 0
        assert FrameObservation(faces=[FaceRegion(bbox=BoundingBox(0, 0, 1, 1))]).face_count == 1


class TestEvent:
    def test_iso_timestamp_utc_millis(self):
        assert iso_timestamp(0) == "1970-01-01T00:00:00.000Z"
        assert iso_timestamp(1714557600.25) == "2024-05-01T10:00:00.250Z"

    def test_create(self):
        event = Event.create(EventType.ABSENCE, 0, "No face for >10s")
        assert event.time == "1970-01-01T00:00:00.000Z"
        assert event.type is EventType.ABSENCE

    def test_immutable(self):
        event = Event("t", EventType.FACE_FOUND)
        with pytest.raises(AttributeError):
            event.detail = "changed"

    def test_to_dict_omits_missing_detail(self):
        assert Event("t", EventType.FACE_FOUND).to_dict() == {"time": "t", "type": "face-found"}
        assert Event("t", EventType.OBJECT_DETECTED, "book").to_dict()["detail"] == "book"

    def test_from_dict(self):
        event = Event.from_dict({"time": "t", "type": "focus-away-5s", "detail": "eye-offset≈20%"})
        assert event == Event("t", EventType.FOCUS_AWAY, "eye-offset≈20%")

    def test_from_dict_drops_non_string_detail(self):
        assert Event.from_dict({"time": "t", "type": "face-found", "detail": 5}).detail is None

    @pytest.mark.parametrize("raw", [
        None,
        [],
        {"type": "face-found"},
        {"time": "t"},
        {"time": 1, "type": "face-found"},
        {"time": "t", "type": 1},
        {"time": "t", "type": "face-lost"},
    ])
    def test_from_dict_rejects_malformed(self, raw):
        with pytest.raises(MalformedInput):
            Event.from_dict(raw)


class TestSession:
    def test_append_and_snapshot(self):
        session = Session(id="s")
        assert session.append([Event("t1", EventType.FACE_FOUND), Event("t2", EventType.ABSENCE)]) == 2

        snapshot = session.events_snapshot()
        snapshot.clear()
        assert session.event_count == 2

    def test_duration_minutes(self):
        session = Session(id="s", created_at=1000.0)
        assert session.duration_minutes(1000.0 + 119) == 2
        assert session.duration_minutes(1000.0 + 29) == 0
        assert session.duration_minutes(900.0) == 0


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        fd = FrameData.from_numpy(frame, timestamp=time.time(), frame_index=3, source="webcam")
        assert fd.size == (640, 480)
        assert fd.frame_index == 3
