"""
Monitoring engine for the proctoring client.

Owns the capture loop: reads frames from an ObservationSource, hands them to
the FrameProcessingService and keeps the event queue's flush timer running
for the lifetime of the loop.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import cv2
import numpy as np

from models.config import Config
from models.event import Event
from models.frame import FrameData
from observation import ObservationSource, OpenCVSource, OpenCVSourceConfig
from runtime.context import RuntimeContext
from runtime.services import FrameProcessingService


@dataclass
class MonitorConfig:
    """
    Configuration for the monitoring engine.

    Attributes:
        max_consecutive_failures: Max frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        display: Show a cv2 preview window with the operator status.
        export_log_path: Write the display log as CSV here on exit.
    """
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    display: bool = False
    export_log_path: Optional[str] = None


@dataclass
class MonitorStats:
    """Runtime statistics for the monitoring loop."""
    frame_count: int = 0
    event_count: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0


class MonitorEngine:
    """
    Capture loop for one monitoring session.

    Example:
        ctx = create_runtime(config)
        engine = create_engine_from_config(config, ctx, display=True)
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        ctx: RuntimeContext,
        config: MonitorConfig,
        service: Optional[FrameProcessingService] = None,
    ):
        self.source = source
        self.ctx = ctx
        self.config = config
        self.service = service or FrameProcessingService(ctx)
        self.stats = MonitorStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, List[Event]], None]] = []

    def add_callback(self, callback: Callable[[FrameData, List[Event]], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, events) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """Open the source, process frames until stopped or exhausted, then clean up."""
        self._running = True
        self.stats = MonitorStats()

        try:
            self.ctx.queue.start()
            # Resume or create the session up front so session-start leads the log.
            self.ctx.queue.ensure_session()
            self.source.open()
            logging.info(f"Monitor started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(0.5)
                    continue

                self.stats.consecutive_failures = 0
                self.stats.frame_count += 1
                events = self.service.handle_frame(frame_data)
                self.stats.event_count += len(events)

                for callback in self._callbacks:
                    try:
                        callback(frame_data, events)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if self.config.display:
                    if not self._handle_display(frame_data):
                        break  # User pressed 'q'

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Monitor interrupted by user")
        except Exception as e:
            logging.exception(f"Monitor error: {e}")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the loop to stop after the current frame."""
        self._running = False

    def _draw_overlay(self, frame: np.ndarray) -> np.ndarray:
        """Draw the operator status line on the frame."""
        status = self.ctx.operator_status
        color = (0, 200, 0) if status == "Focused" else (0, 0, 255)
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, th), _ = cv2.getTextSize(status, font, 0.6, 1)
        cv2.rectangle(frame, (8, 8), (16 + tw, 16 + th + 4), (0, 0, 0), -1)
        cv2.putText(frame, status, (12, 12 + th), font, 0.6, color, 1)
        return frame

    def _handle_display(self, frame_data: FrameData) -> bool:
        """
        Show the preview window.

        Returns False if the user pressed 'q' to quit.
        """
        cv2.imshow("Proctor Monitor", self._draw_overlay(frame_data.frame.copy()))
        key = cv2.waitKey(1) & 0xFF
        return key != ord("q")

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Monitor stats: frames={self.stats.frame_count}, "
                f"events={self.stats.event_count}, "
                f"dropped={self.service.dropped_frames}, "
                f"pending={self.ctx.queue.pending_count()}, "
                f"session={self.ctx.queue.session_id}, "
                f"status={self.ctx.operator_status}"
            )
            self.stats.last_stats_log_time = now

    def export_display_log(self, path: str) -> None:
        """Write the operator display log as CSV."""
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "wb") as f:
            f.write(self.ctx.machine.display_log_csv())
        logging.info(f"Display log written to {path}")

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self.ctx.queue.stop(final_flush=True)

        if self.config.export_log_path:
            try:
                self.export_display_log(self.config.export_log_path)
            except OSError as e:
                logging.error(f"Failed to write display log: {e}")

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Monitor stopped")


def create_engine_from_config(
    config: Config,
    ctx: RuntimeContext,
    display: bool = False,
    export_log_path: Optional[str] = None,
) -> MonitorEngine:
    """Build a MonitorEngine reading from the configured camera."""
    source_cfg = OpenCVSourceConfig.from_capture_config(
        config.capture, config.detection.performance_mode
    )
    return MonitorEngine(
        OpenCVSource(source_cfg),
        ctx,
        MonitorConfig(display=display, export_log_path=export_log_path),
    )
