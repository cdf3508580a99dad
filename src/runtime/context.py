from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from delivery import EventQueue, SessionApiClient, SessionIdFile
from detection import DetectionStateMachine
from inference.backend import FaceBackend, ObjectBackend
from models.config import Config
from models.errors import ModelUnavailable

BackendFactory = Callable[[Config], object]


@dataclass
class RuntimeContext:
    """Holds the monitoring client's collaborators; avoids global singletons."""

    config: Config
    machine: DetectionStateMachine
    queue: EventQueue
    face_backend: Optional[FaceBackend] = None
    object_backend: Optional[ObjectBackend] = None

    # Modalities that could not be loaded, with the reason shown to the operator
    degraded: Dict[str, str] = field(default_factory=dict)

    def mark_degraded(self, modality: str, reason: str) -> None:
        self.degraded[modality] = reason
        logging.error(f"{modality} detection unavailable: {reason}")

    @property
    def operator_status(self) -> str:
        """Status line for the operator view."""
        if "face" in self.degraded:
            return "Face model unavailable"
        status = self.machine.status_label
        if "object" in self.degraded and self.config.detection.objects_enabled:
            status += " (object detection unavailable)"
        return status


def default_face_backend(config: Config) -> FaceBackend:
    from inference.mediapipe_backend import MediaPipeFaceBackend, MediaPipeFaceConfig

    det = config.detection
    return MediaPipeFaceBackend(
        MediaPipeFaceConfig(
            model_selection=det.face_model_selection,
            min_detection_confidence=det.face_min_confidence,
            max_faces=det.max_faces,
        )
    )


def default_object_backend(config: Config) -> ObjectBackend:
    from inference.cpu_backend import CpuYoloConfig, UltralyticsObjectBackend

    det = config.detection
    input_size = (256, 192) if det.performance_mode else (320, 240)
    return UltralyticsObjectBackend(CpuYoloConfig(model=det.object_model, input_size=input_size))


def create_runtime(
    config: Config,
    client: Optional[SessionApiClient] = None,
    id_store=None,
    face_factory: BackendFactory = default_face_backend,
    object_factory: BackendFactory = default_object_backend,
) -> RuntimeContext:
    """
    Wire the monitoring client: queue, state machine and inference backends.

    A backend that raises ModelUnavailable leaves its modality disabled; the
    other modality keeps running.
    """
    client_cfg = config.client
    if client is None:
        client = SessionApiClient(client_cfg.api_base, timeout=client_cfg.request_timeout_s)
    if id_store is None:
        id_store = SessionIdFile(client_cfg.session_file)

    queue = EventQueue(
        client,
        id_store,
        candidate_name=client_cfg.candidate_name,
        flush_interval=client_cfg.flush_interval_s,
    )
    machine = DetectionStateMachine(config.detection, sink=queue.push)
    ctx = RuntimeContext(config=config, machine=machine, queue=queue)

    try:
        ctx.face_backend = face_factory(config)
    except ModelUnavailable as e:
        ctx.mark_degraded("face", e.reason)

    if config.detection.objects_enabled:
        try:
            ctx.object_backend = object_factory(config)
        except ModelUnavailable as e:
            ctx.mark_degraded("object", e.reason)

    return ctx
