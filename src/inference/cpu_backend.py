"""
CPU object-recognition backend.

Uses Ultralytics YOLO (COCO classes such as "cell phone", "book", "laptop").
Frames are downscaled before inference to keep the sampling cheap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from models.detection import BoundingBox, ObjectDetection
from models.errors import ModelUnavailable

from .backend import ObjectBackend


@dataclass(frozen=True)
class CpuYoloConfig:
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    input_size: Optional[Tuple[int, int]] = (320, 240)


class UltralyticsObjectBackend(ObjectBackend):
    def __init__(self, cfg: CpuYoloConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ModelUnavailable(
                "object",
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or disable detection.objects_enabled.",
            ) from e

        try:
            self._model = YOLO(cfg.model)
        except Exception as e:  # pragma: no cover
            raise ModelUnavailable("object", str(e)) from e

    def _prepare(self, frame: np.ndarray) -> Tuple[np.ndarray, float, float]:
        if self.cfg.input_size is None:
            return frame, 1.0, 1.0
        h, w = frame.shape[:2]
        tw, th = self.cfg.input_size
        small = cv2.resize(frame, (tw, th))
        return small, w / float(tw), h / float(th)

    def detect_objects(self, frame: np.ndarray) -> List[ObjectDetection]:
        small, sx, sy = self._prepare(frame)
        results = self._model.predict(source=small, conf=self.cfg.conf_threshold, verbose=False)
        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes.xyxy, "cpu") else np.asarray(boxes.xyxy)
        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)
        cls = boxes.cls.cpu().numpy() if hasattr(boxes.cls, "cpu") else np.asarray(boxes.cls)

        out: List[ObjectDetection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            out.append(
                ObjectDetection(
                    label=str(names.get(class_id, class_id)),
                    confidence=float(c),
                    bbox=BoundingBox(
                        x1=float(x1) * sx,
                        y1=float(y1) * sy,
                        x2=float(x2) * sx,
                        y2=float(y2) * sy,
                    ),
                )
            )
        return out
