from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List

from models.detection import FrameObservation
from models.event import Event
from models.frame import FrameData
from runtime.context import RuntimeContext


class FrameProcessingService:
    """
    Runs inference on captured frames and feeds the detection state machine.

    Faces are evaluated on every n-th frame (the cadence depends on the
    performance mode); objects only when the state machine says a sample is
    due. Processing is non-reentrant: a frame that arrives while the previous
    one is still in inference is dropped.
    """

    def __init__(self, ctx: RuntimeContext, clock: Callable[[], float] = time.time):
        self.ctx = ctx
        self._clock = clock
        self._busy = threading.Lock()
        self.frame_idx = 0
        self.dropped_frames = 0

    def handle_frame(self, frame_data: FrameData) -> List[Event]:
        if not self._busy.acquire(blocking=False):
            self.dropped_frames += 1
            return []
        try:
            return self._process(frame_data)
        finally:
            self._busy.release()

    def _process(self, frame_data: FrameData) -> List[Event]:
        self.frame_idx += 1
        now = self._clock()
        frame = frame_data.frame

        faces = None
        cadence = max(1, self.ctx.config.detection.face_cadence)
        if self.ctx.face_backend is not None and self.frame_idx % cadence == 0:
            try:
                faces = self.ctx.face_backend.detect_faces(frame)
            except Exception as e:
                logging.error(f"Face inference failed on frame {frame_data.frame_index}: {e}")

        objects = None
        if self.ctx.object_backend is not None and self.ctx.machine.object_sampling_due(now):
            try:
                objects = self.ctx.object_backend.detect_objects(frame)
            except Exception as e:
                # An empty sample still advances the sampling interval.
                logging.error(f"Object inference failed on frame {frame_data.frame_index}: {e}")
                objects = []

        if faces is None and objects is None:
            return []
        return self.ctx.machine.process(FrameObservation(faces=faces, objects=objects), now=now)
