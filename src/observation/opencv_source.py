"""
OpenCV-based frame source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- Recorded video files (device_id as file path), useful for replaying a sitting
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2
import numpy as np

from models.config import CaptureConfig
from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV capture.

    Attributes:
        device_id: Camera index (int) or video file path (str).
        buffer_size: Capture buffer size; 1 keeps live frames fresh.
        max_retries: Attempts before open() gives up.
        mirror: Flip frames horizontally (selfie view).
    """
    device_id: Union[int, str] = 0
    buffer_size: int = 1
    max_retries: int = 3
    mirror: bool = False

    @classmethod
    def from_capture_config(
        cls, capture: CaptureConfig, performance_mode: bool, source_id: str = "webcam"
    ) -> "OpenCVSourceConfig":
        """Pick the capture profile that matches the performance mode."""
        if performance_mode:
            resolution, fps = capture.performance_resolution, capture.performance_fps
        else:
            resolution, fps = capture.resolution, capture.fps
        return cls(
            source_id=source_id,
            resolution=tuple(resolution) if resolution else None,
            fps=fps,
            device_id=capture.device_id,
        )


class OpenCVSource(ObservationSource):
    """
    Wraps cv2.VideoCapture and yields FrameData objects.

    Example:
        config = OpenCVSourceConfig(device_id=0, resolution=(640, 480))
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._consecutive_failures = 0

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    def open(self) -> None:
        if self._is_open:
            return
        self._initialize(retry_count=0)
        self._is_open = True
        self._frame_index = 0
        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, "
            f"device={self.device_id}, resolution={self._opencv_config.resolution}"
        )

    def _initialize(self, retry_count: int = 0) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

        if retry_count > 0:
            wait_time = min(2 ** retry_count, 10)
            logging.info(
                f"Retrying camera open (attempt {retry_count + 1}/"
                f"{self._opencv_config.max_retries}) after {wait_time}s"
            )
            time.sleep(wait_time)

        self._cap = cv2.VideoCapture(self.device_id)

        if not self._cap.isOpened():
            if retry_count < self._opencv_config.max_retries - 1:
                logging.warning(f"Failed to open device {self.device_id}, retrying...")
                return self._initialize(retry_count + 1)
            raise RuntimeError(
                f"Failed to open device {self.device_id} after "
                f"{self._opencv_config.max_retries} attempts"
            )

        if isinstance(self.device_id, int) and self._opencv_config.resolution:
            w, h = self._opencv_config.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._opencv_config.fps:
                self._cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._opencv_config.buffer_size)
            logging.info(
                f"Camera actual settings - Resolution: "
                f"({self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)}x{self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)}), "
                f"FPS: {self._cap.get(cv2.CAP_PROP_FPS)}"
            )

        self._consecutive_failures = 0

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            self._consecutive_failures += 1
            if self.is_file:
                logging.info("End of video file reached")
                return None
            if self._consecutive_failures > 3:
                logging.error("Too many consecutive read failures")
                return None
            logging.warning(
                f"Failed to read frame (failures: {self._consecutive_failures}), reinitializing..."
            )
            try:
                self._initialize()
            except RuntimeError:
                logging.error("Reinitialization failed")
                return None
            ret, frame = self._cap.read()
            if not ret or frame is None:
                return None

        self._consecutive_failures = 0
        frame = self._apply_transforms(frame)
        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def _apply_transforms(self, frame: np.ndarray) -> np.ndarray:
        if self._opencv_config.mirror:
            frame = cv2.flip(frame, 1)
        return frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._is_open = False
        logging.info(f"OpenCVSource closed: source_id={self.source_id}")
