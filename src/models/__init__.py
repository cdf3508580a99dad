"""
Typed models for the proctoring monitor and session store.
"""

from .frame import FrameData
from .detection import BoundingBox, FaceRegion, ObjectDetection, FrameObservation
from .event import Event, EventType, iso_timestamp
from .session import Session
from .errors import MalformedInput, ModelUnavailable, SessionNotFound, TransportFailure
from .config import (
    Config,
    ServerConfig,
    ClientConfig,
    CaptureConfig,
    DetectionConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "BoundingBox",
    "FaceRegion",
    "ObjectDetection",
    "FrameObservation",
    # Events and sessions
    "Event",
    "EventType",
    "iso_timestamp",
    "Session",
    # Errors
    "MalformedInput",
    "ModelUnavailable",
    "SessionNotFound",
    "TransportFailure",
    # Config
    "Config",
    "ServerConfig",
    "ClientConfig",
    "CaptureConfig",
    "DetectionConfig",
]
