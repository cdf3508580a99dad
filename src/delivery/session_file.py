"""
Durable client storage for the last-known session id.

The file holds exactly one key, `sessionId`, so a restarted monitor resumes
the session it was reporting to.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

SESSION_KEY = "sessionId"


class SessionIdFile:
    """Reads and writes `{"sessionId": ...}` at a fixed path."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None
        value = data.get(SESSION_KEY) if isinstance(data, dict) else None
        return value if isinstance(value, str) and value else None

    def save(self, session_id: str) -> None:
        os.makedirs(self.path.parent, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({SESSION_KEY: session_id}), encoding="utf-8")
        os.replace(tmp, self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class MemorySessionId:
    """In-process stand-in for SessionIdFile (tests, ephemeral monitors)."""

    def __init__(self, session_id: Optional[str] = None):
        self._value = session_id

    def load(self) -> Optional[str]:
        return self._value

    def save(self, session_id: str) -> None:
        self._value = session_id

    def clear(self) -> None:
        self._value = None
