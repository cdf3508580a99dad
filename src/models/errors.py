"""
Error taxonomy shared by the store, the delivery client and the runtime.
"""

from __future__ import annotations


class SessionNotFound(LookupError):
    """Unknown session id. Recoverable on the client by recreating a session."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class TransportFailure(RuntimeError):
    """Network error, timeout or unexpected response from the session store."""


class MalformedInput(ValueError):
    """An event entry is missing required fields. Dropped, never surfaced."""


class ModelUnavailable(RuntimeError):
    """An inference model failed to initialize; its modality is skipped."""

    def __init__(self, modality: str, reason: str):
        super().__init__(f"{modality} model unavailable: {reason}")
        self.modality = modality
        self.reason = reason
