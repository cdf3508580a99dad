"""
Inference backend interfaces.

Backends return pixel-space results in the original frame coordinate system.
Construction raises ModelUnavailable when the model cannot be loaded; the
runtime then runs without that modality.
"""

from __future__ import annotations

from typing import List, Protocol

import numpy as np

from models.detection import FaceRegion, ObjectDetection


class FaceBackend(Protocol):
    def detect_faces(self, frame: np.ndarray) -> List[FaceRegion]:
        ...


class ObjectBackend(Protocol):
    def detect_objects(self, frame: np.ndarray) -> List[ObjectDetection]:
        ...
