"""
Session storage (in-memory, process lifetime).
"""

from .session_store import SessionStore

__all__ = ["SessionStore"]
