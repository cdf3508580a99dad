"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.config import DetectionConfig  # noqa: E402
from models.detection import BoundingBox, FaceRegion  # noqa: E402
from models.errors import SessionNotFound, TransportFailure  # noqa: E402
from storage import SessionStore  # noqa: E402


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
server:
  host: "0.0.0.0"
  port: 4000

client:
  api_base: "http://localhost:4000"
  flush_interval_s: 5.0

capture:
  device_id: 0
  resolution: [640, 480]
  fps: 24

detection:
  performance_mode: true
  objects_enabled: false

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "server": {
            "host": "127.0.0.1",
            "port": 4000,
            "cors_origins": ["*"],
        },
        "client": {
            "api_base": "http://localhost:4000",
            "request_timeout_s": 5.0,
            "flush_interval_s": 5.0,
            "candidate_name": "Candidate",
            "session_file": "data/test_session.json",
        },
        "capture": {
            "device_id": 0,
            "resolution": [640, 480],
            "fps": 24,
            "performance_resolution": [320, 240],
            "performance_fps": 12,
        },
        "detection": {
            "performance_mode": True,
            "objects_enabled": False,
            "absence_seconds": 10,
            "focus_away_seconds": 5,
            "gaze_threshold": 0.12,
            "object_confidence": 0.8,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def detection_config():
    """Detection config with object sampling enabled at the full-mode interval."""
    return DetectionConfig(performance_mode=False, objects_enabled=True)


@pytest.fixture
def store():
    return SessionStore()


def make_face(offset: float = 0.0, width: float = 100.0) -> FaceRegion:
    """
    A face box at x=[100, 100+width] whose eye midpoint sits `offset` box
    widths away from the centre.
    """
    box = BoundingBox(x1=100.0, y1=100.0, x2=100.0 + width, y2=200.0)
    mid = box.center[0] + offset * width
    return FaceRegion(bbox=box, landmarks=((mid - 10.0, 130.0), (mid + 10.0, 130.0)))


@pytest.fixture
def face_factory():
    return make_face


class FakeClient:
    """
    In-memory stand-in for SessionApiClient. Records delivered batches per
    session id. `lost` ids answer 404; `fail_appends` / `fail_creates` raise
    TransportFailure that many times.
    """

    def __init__(self):
        self.sessions = {}
        self.lost = set()
        self.fail_appends = 0
        self.fail_creates = 0
        self.created = []
        self._next = 0

    def create_session(self, candidate_name=None):
        if self.fail_creates:
            self.fail_creates -= 1
            raise TransportFailure("connection refused")
        self._next += 1
        session_id = f"s{self._next}"
        self.sessions[session_id] = []
        self.created.append((session_id, candidate_name))
        return session_id

    def append_events(self, session_id, events):
        if self.fail_appends:
            self.fail_appends -= 1
            raise TransportFailure("timeout")
        if session_id in self.lost or session_id not in self.sessions:
            raise SessionNotFound(session_id)
        self.sessions[session_id].extend(events)
        return len(events)

    def types(self, session_id):
        return [e.type for e in self.sessions[session_id]]
