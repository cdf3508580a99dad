"""
Detection models: per-frame inference results fed to the state machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple."""
        return (int(self.x1), int(self.y1), int(self.x2), int(self.y2))

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float) -> "BoundingBox":
        """Create from (x, y, width, height) format."""
        return cls(x1=x, y1=y, x2=x + w, y2=y + h)


@dataclass(frozen=True)
class FaceRegion:
    """
    A detected face.

    Landmarks follow the BlazeFace / MediaPipe short-range ordering:
    right eye, left eye, nose tip, mouth centre, right ear, left ear.
    """
    bbox: BoundingBox
    landmarks: Tuple[Point, ...] = ()
    confidence: float = 1.0

    @property
    def eye_midpoint_x(self) -> float:
        """Horizontal midpoint of the two eye landmarks, or the box centre without them."""
        if len(self.landmarks) >= 2:
            right_eye, left_eye = self.landmarks[0], self.landmarks[1]
            return (right_eye[0] + left_eye[0]) / 2
        return self.bbox.center[0]


@dataclass(frozen=True)
class ObjectDetection:
    """A labelled object from the object-recognition model."""
    label: str
    confidence: float
    bbox: Optional[BoundingBox] = None


@dataclass(frozen=True)
class FrameObservation:
    """
    Inference results for one evaluated frame.

    Attributes:
        faces: Detected faces, or None when face detection was not run for
            this frame (cadence throttling or model unavailable).
        objects: Detected objects, or None when object detection was not run.
    """
    faces: Optional[Sequence[FaceRegion]] = None
    objects: Optional[Sequence[ObjectDetection]] = None

    @property
    def face_count(self) -> Optional[int]:
        return None if self.faces is None else len(self.faces)

