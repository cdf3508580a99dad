"""
In-memory session store holding the authoritative per-session event logs.

Sessions live for the lifetime of the process. There is no delete operation.
Appends to one session are serialized by that session's lock, so insertion
order reflects arrival order. Operations on different sessions do not contend
beyond the short map lookup.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional

from models.errors import MalformedInput, SessionNotFound
from models.event import Event
from models.session import Session


class SessionStore:
    """Sessions keyed by opaque id, each an append-only ordered event log."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create_session(self, candidate_name: Optional[str] = None) -> str:
        """Allocate a fresh session with an empty log. Never fails."""
        session_id = str(uuid.uuid4())
        session = Session(id=session_id, created_at=time.time(), candidate_name=candidate_name)
        with self._lock:
            self._sessions[session_id] = session
        logging.info(f"Session created: {session_id} (candidate={candidate_name or 'N/A'})")
        return session_id

    def get_session(self, session_id: str) -> Session:
        """
        Raises:
            SessionNotFound: If the id is unknown.
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def append_events(self, session_id: str, events: Iterable[Any]) -> int:
        """
        Validate and append raw event entries in input order.

        Malformed entries are dropped individually; the rest of the batch is
        still appended.

        Returns:
            Number of events actually appended (possibly zero).

        Raises:
            SessionNotFound: If the id is unknown.
        """
        session = self.get_session(session_id)
        valid: List[Event] = []
        dropped = 0
        for raw in events or []:
            try:
                valid.append(Event.from_dict(raw))
            except MalformedInput as e:
                dropped += 1
                logging.debug(f"Dropping malformed event for {session_id}: {e}")
        count = session.append(valid)
        if dropped:
            logging.debug(f"Session {session_id}: appended {count}, dropped {dropped}")
        return count

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)
