"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DEFAULT_OBJECT_CLASSES = [
    "cell phone",
    "book",
    "laptop",
    "keyboard",
    "mouse",
    "bottle",
    "charger",
    "camera",
]


@dataclass
class ServerConfig:
    """Session store API server configuration."""
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    report_max_rows: int = 30
    report_line_chars: int = 90

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ServerConfig":
        return cls(
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 4000),
            cors_origins=d.get("cors_origins", ["*"]),
            report_max_rows=d.get("report_max_rows", 30),
            report_line_chars=d.get("report_line_chars", 90),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "cors_origins": self.cors_origins,
            "report_max_rows": self.report_max_rows,
            "report_line_chars": self.report_line_chars,
        }


@dataclass
class ClientConfig:
    """Event delivery client configuration."""
    api_base: str = "http://localhost:4000"
    request_timeout_s: float = 5.0
    flush_interval_s: float = 5.0
    candidate_name: Optional[str] = "Candidate"
    session_file: str = "data/client_session.json"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClientConfig":
        return cls(
            api_base=d.get("api_base", "http://localhost:4000"),
            request_timeout_s=d.get("request_timeout_s", 5.0),
            flush_interval_s=d.get("flush_interval_s", 5.0),
            candidate_name=d.get("candidate_name", "Candidate"),
            session_file=d.get("session_file", "data/client_session.json"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "api_base": self.api_base,
            "request_timeout_s": self.request_timeout_s,
            "flush_interval_s": self.flush_interval_s,
            "candidate_name": self.candidate_name,
            "session_file": self.session_file,
        }


@dataclass
class CaptureConfig:
    """Camera capture configuration. Resolution depends on performance mode."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 24
    performance_resolution: List[int] = field(default_factory=lambda: [320, 240])
    performance_fps: int = 12

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CaptureConfig":
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 24),
            performance_resolution=d.get("performance_resolution", [320, 240]),
            performance_fps=d.get("performance_fps", 12),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "performance_resolution": self.performance_resolution,
            "performance_fps": self.performance_fps,
        }


@dataclass
class DetectionConfig:
    """Thresholds and cadences for the detection state machine."""
    performance_mode: bool = True
    objects_enabled: bool = False
    face_every_n_frames: int = 2
    face_every_n_frames_performance: int = 4
    absence_seconds: float = 10.0
    focus_away_seconds: float = 5.0
    gaze_threshold: float = 0.12
    gaze_smoothing: float = 0.2
    object_confidence: float = 0.8
    object_interval_s: float = 1.2
    object_interval_performance_s: float = 3.5
    object_classes: List[str] = field(default_factory=lambda: list(DEFAULT_OBJECT_CLASSES))
    max_faces: int = 2
    face_model_selection: int = 0
    face_min_confidence: float = 0.5
    object_model: str = "yolov8n.pt"

    @property
    def face_cadence(self) -> int:
        """Evaluate faces on every n-th captured frame."""
        return self.face_every_n_frames_performance if self.performance_mode else self.face_every_n_frames

    @property
    def object_interval(self) -> float:
        return self.object_interval_performance_s if self.performance_mode else self.object_interval_s

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            performance_mode=d.get("performance_mode", True),
            objects_enabled=d.get("objects_enabled", False),
            face_every_n_frames=d.get("face_every_n_frames", 2),
            face_every_n_frames_performance=d.get("face_every_n_frames_performance", 4),
            absence_seconds=d.get("absence_seconds", 10.0),
            focus_away_seconds=d.get("focus_away_seconds", 5.0),
            gaze_threshold=d.get("gaze_threshold", 0.12),
            gaze_smoothing=d.get("gaze_smoothing", 0.2),
            object_confidence=d.get("object_confidence", 0.8),
            object_interval_s=d.get("object_interval_s", 1.2),
            object_interval_performance_s=d.get("object_interval_performance_s", 3.5),
            object_classes=d.get("object_classes", list(DEFAULT_OBJECT_CLASSES)),
            max_faces=d.get("max_faces", 2),
            face_model_selection=d.get("face_model_selection", 0),
            face_min_confidence=d.get("face_min_confidence", 0.5),
            object_model=d.get("object_model", "yolov8n.pt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "performance_mode": self.performance_mode,
            "objects_enabled": self.objects_enabled,
            "face_every_n_frames": self.face_every_n_frames,
            "face_every_n_frames_performance": self.face_every_n_frames_performance,
            "absence_seconds": self.absence_seconds,
            "focus_away_seconds": self.focus_away_seconds,
            "gaze_threshold": self.gaze_threshold,
            "gaze_smoothing": self.gaze_smoothing,
            "object_confidence": self.object_confidence,
            "object_interval_s": self.object_interval_s,
            "object_interval_performance_s": self.object_interval_performance_s,
            "object_classes": self.object_classes,
            "max_faces": self.max_faces,
            "face_model_selection": self.face_model_selection,
            "face_min_confidence": self.face_min_confidence,
            "object_model": self.object_model,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    log_path: str = "logs/proctor_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            server=ServerConfig.from_dict(d.get("server", {}) or {}),
            client=ClientConfig.from_dict(d.get("client", {}) or {}),
            capture=CaptureConfig.from_dict(d.get("capture", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            log_path=d.get("log_path", "logs/proctor_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server": self.server.to_dict(),
            "client": self.client.to_dict(),
            "capture": self.capture.to_dict(),
            "detection": self.detection.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
