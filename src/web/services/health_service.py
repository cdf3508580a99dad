from __future__ import annotations

import os
import platform
import time
from dataclasses import dataclass
from typing import Any, Dict

from models.config import Config
from storage import SessionStore


@dataclass
class HealthService:
    cfg: Config
    store: SessionStore
    start_time: float

    def get_health_summary(self) -> Dict[str, Any]:
        now = time.time()
        return {
            "ok": True,
            "timestamp": now,
            "uptime_seconds": int(now - self.start_time),
            "platform": platform.platform(),
            "python": platform.python_version(),
            "cwd": os.getcwd(),
            "log_path": self.cfg.log_path,
            "session_count": self.store.session_count(),
        }
