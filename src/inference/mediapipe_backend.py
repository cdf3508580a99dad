"""
Face backend built on MediaPipe short-range face detection.

MediaPipe returns six relative keypoints per face (right eye, left eye, nose
tip, mouth centre, right ear, left ear), which is what the gaze rule needs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import cv2
import numpy as np

from models.detection import BoundingBox, FaceRegion
from models.errors import ModelUnavailable

from .backend import FaceBackend


@dataclass(frozen=True)
class MediaPipeFaceConfig:
    model_selection: int = 0  # 0 for close-range, 1 for full-range
    min_detection_confidence: float = 0.5
    max_faces: int = 2


class MediaPipeFaceBackend(FaceBackend):
    def __init__(self, cfg: MediaPipeFaceConfig):
        self.cfg = cfg
        try:
            import mediapipe as mp  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ModelUnavailable(
                "face", "MediaPipe is not installed. Install with `pip install mediapipe`."
            ) from e

        try:
            self._detector = mp.solutions.face_detection.FaceDetection(
                model_selection=cfg.model_selection,
                min_detection_confidence=cfg.min_detection_confidence,
            )
        except Exception as e:  # pragma: no cover
            raise ModelUnavailable("face", str(e)) from e
        logging.info("MediaPipe face detector initialized")

    def detect_faces(self, frame: np.ndarray) -> List[FaceRegion]:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self._detector.process(rgb)
        if not results.detections:
            return []

        h, w = frame.shape[:2]
        faces: List[FaceRegion] = []
        for detection in results.detections:
            box = detection.location_data.relative_bounding_box
            keypoints = tuple(
                (kp.x * w, kp.y * h) for kp in detection.location_data.relative_keypoints
            )
            faces.append(
                FaceRegion(
                    bbox=BoundingBox.from_xywh(box.xmin * w, box.ymin * h, box.width * w, box.height * h),
                    landmarks=keypoints,
                    confidence=float(detection.score[0]) if detection.score else 1.0,
                )
            )

        faces.sort(key=lambda f: f.confidence, reverse=True)
        return faces[: self.cfg.max_faces]

    def close(self) -> None:
        self._detector.close()
