"""
Gaze offset estimation from face landmarks.

The eye midpoint drifts horizontally away from the face-box centre as the head
turns. The offset is normalized by box width, so values fall roughly within
[-0.5, 0.5] regardless of distance to the camera.
"""

from __future__ import annotations

from models.detection import FaceRegion


def gaze_offset_fraction(face: FaceRegion) -> float:
    """Horizontal eye-midpoint offset from the face centre, as a fraction of box width."""
    box_width = max(1.0, face.bbox.width)
    return (face.eye_midpoint_x - face.bbox.center[0]) / box_width


def smooth_offset(previous: float, sample: float, alpha: float = 0.2) -> float:
    """Exponential moving average step: (1 - alpha) * previous + alpha * sample."""
    return (1.0 - alpha) * previous + alpha * sample


def is_looking_away(offset_ema: float, threshold: float = 0.12) -> bool:
    return abs(offset_ema) > threshold


def offset_detail(offset_ema: float) -> str:
    """Event detail for a focus-away event, e.g. 'eye-offset≈15%'."""
    return f"eye-offset≈{abs(offset_ema) * 100:.0f}%"
