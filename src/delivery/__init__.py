"""
Client-side event delivery to the session store.
"""

from .client import SessionApiClient
from .queue import EventQueue, SessionState
from .session_file import MemorySessionId, SessionIdFile

__all__ = [
    "SessionApiClient",
    "EventQueue",
    "SessionState",
    "SessionIdFile",
    "MemorySessionId",
]
