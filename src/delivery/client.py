"""
HTTP client for the session store API.

Every request carries a bounded timeout. Failures are mapped onto the error
taxonomy the event queue understands:
- 404 -> SessionNotFound (the server lost the session; recreate it)
- connection errors, timeouts, other non-2xx -> TransportFailure (requeue)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import requests

from models.errors import SessionNotFound, TransportFailure
from models.event import Event


class SessionApiClient:
    """Talks to `POST /api/session` and `POST /api/session/{id}/events`."""

    def __init__(
        self,
        api_base: str,
        timeout: float = 5.0,
        http: Optional[requests.Session] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._http = http or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> requests.Response:
        url = f"{self.api_base}{path}"
        try:
            return self._http.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportFailure(f"POST {path} failed: {e}") from e

    @staticmethod
    def _json(resp: requests.Response, path: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportFailure(f"POST {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise TransportFailure(f"POST {path} returned unexpected payload")
        return data

    def create_session(self, candidate_name: Optional[str] = None) -> str:
        """Create a session and return its id."""
        path = "/api/session"
        payload: Dict[str, Any] = {}
        if candidate_name:
            payload["candidateName"] = candidate_name
        resp = self._post(path, payload)
        if not resp.ok:
            raise TransportFailure(f"POST {path} returned HTTP {resp.status_code}")
        session_id = self._json(resp, path).get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            raise TransportFailure(f"POST {path} response missing sessionId")
        return session_id

    def append_events(self, session_id: str, events: Sequence[Event]) -> int:
        """
        Deliver a batch of events. Returns the count the server appended.

        Raises:
            SessionNotFound: If the server does not know `session_id`.
            TransportFailure: On any other delivery failure.
        """
        path = f"/api/session/{session_id}/events"
        resp = self._post(path, {"events": [e.to_dict() for e in events]})
        if resp.status_code == 404:
            raise SessionNotFound(session_id)
        if not resp.ok:
            raise TransportFailure(f"POST {path} returned HTTP {resp.status_code}")
        count = self._json(resp, path).get("count", 0)
        logging.debug(f"Delivered {len(events)} events to {session_id} (appended={count})")
        return int(count)

    def close(self) -> None:
        self._http.close()
