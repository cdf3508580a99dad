"""
Event queue: buffers emitted events and delivers them to the session store.

Session identity moves UNINITIALIZED -> ENSURING -> READY. The id is cached in
memory and in durable client storage, so a restarted monitor keeps reporting
to the same session.

Delivery policy per flush:
- success: the batch is discarded;
- SessionNotFound: the session is recreated (its session-start is delivered
  first) and the batch is retried once against the new id; a failed retry
  drops the batch;
- TransportFailure: the batch goes back to the front of the buffer, in order,
  for the next timer tick.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from models.errors import SessionNotFound, TransportFailure
from models.event import Event, EventType

from .client import SessionApiClient


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ENSURING = "ensuring"
    READY = "ready"


class EventQueue:
    """
    Pending event buffer plus session ownership and timed delivery.

    Example:
        queue = EventQueue(SessionApiClient(api_base), SessionIdFile(path))
        queue.start()
        queue.push(event)
        ...
        queue.stop()
    """

    def __init__(
        self,
        client: SessionApiClient,
        id_store,
        candidate_name: Optional[str] = None,
        flush_interval: float = 5.0,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._id_store = id_store
        self.candidate_name = candidate_name
        self.flush_interval = flush_interval
        self._clock = clock

        self._pending: List[Event] = []
        self._pending_lock = threading.Lock()
        # Reentrant so session creation can flush from inside a flush.
        self._flush_lock = threading.RLock()
        self._recreating = False

        self._session_id: Optional[str] = None
        self._state = SessionState.UNINITIALIZED

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def session_state(self) -> SessionState:
        return self._state

    # Pending buffer

    def push(self, event: Event) -> None:
        with self._pending_lock:
            self._pending.append(event)

    def pending(self) -> List[Event]:
        with self._pending_lock:
            return list(self._pending)

    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def _drain(self) -> List[Event]:
        with self._pending_lock:
            batch, self._pending = self._pending, []
        return batch

    def _requeue(self, batch: List[Event]) -> None:
        with self._pending_lock:
            self._pending[:0] = batch

    # Session identity

    def ensure_session(self) -> Optional[str]:
        """Return the current session id, resuming or creating one if needed."""
        with self._flush_lock:
            return self._ensure_session()

    def _ensure_session(self) -> Optional[str]:
        if self._session_id:
            return self._session_id
        saved = self._id_store.load()
        if saved:
            self._session_id = saved
            self._state = SessionState.READY
            logging.info(f"Resuming session {saved}")
            return saved
        return self._create_session()

    def _create_session(self) -> Optional[str]:
        self._state = SessionState.ENSURING
        try:
            session_id = self._client.create_session(self.candidate_name)
        except TransportFailure as e:
            logging.warning(f"Failed to create session: {e}")
            self._state = SessionState.UNINITIALIZED
            return None

        self._session_id = session_id
        try:
            self._id_store.save(session_id)
        except OSError as e:
            logging.warning(f"Could not persist session id {session_id}, keeping it in memory: {e}")
        self._state = SessionState.READY
        logging.info(f"Session created: {session_id}")

        start_event = Event.create(EventType.SESSION_START, self._clock())
        with self._pending_lock:
            if self._recreating:
                # delivered ahead of the batch being retried
                self._pending.insert(0, start_event)
            else:
                self._pending.append(start_event)
        self.flush()
        return session_id

    def _forget_session(self) -> None:
        self._session_id = None
        self._state = SessionState.UNINITIALIZED
        try:
            self._id_store.clear()
        except OSError as e:
            logging.warning(f"Could not clear stored session id: {e}")

    # Delivery

    def flush(self) -> bool:
        """
        Deliver everything pending. Skipped when another flush is in progress.

        Returns:
            True if the drained batch was delivered (or nothing was pending).
        """
        if not self._flush_lock.acquire(blocking=False):
            logging.debug("Flush already in progress, skipping")
            return False
        try:
            return self._flush()
        finally:
            self._flush_lock.release()

    def _flush(self) -> bool:
        session_id = self._ensure_session()
        if session_id is None:
            return False
        batch = self._drain()
        if not batch:
            return True
        return self._deliver(session_id, batch)

    def _deliver(self, session_id: str, batch: List[Event]) -> bool:
        try:
            self._client.append_events(session_id, batch)
            return True
        except SessionNotFound:
            if self._recreating:
                logging.warning(f"New session {session_id} not found either, requeueing {len(batch)} events")
                self._requeue(batch)
                return False
            logging.warning(f"Session {session_id} lost on server, recreating")
            return self._recreate_and_retry(batch)
        except TransportFailure as e:
            logging.warning(f"Delivery of {len(batch)} events failed, requeueing: {e}")
            self._requeue(batch)
            return False

    def _recreate_and_retry(self, batch: List[Event]) -> bool:
        self._forget_session()
        self._recreating = True
        try:
            new_id = self._create_session()
        finally:
            self._recreating = False
        if new_id is None:
            self._requeue(batch)
            return False
        try:
            self._client.append_events(new_id, batch)
            return True
        except (SessionNotFound, TransportFailure) as e:
            logging.warning(f"Retry against session {new_id} failed, dropping {len(batch)} events: {e}")
            return False

    # Timer

    def start(self) -> bool:
        """Start the background flush timer."""
        if self._thread is None or not self._thread.is_alive():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._flush_worker, name="event-flush")
            self._thread.daemon = True
            self._thread.start()
            logging.info(f"Event flush thread started (interval={self.flush_interval}s)")
            return True
        return False

    def stop(self, final_flush: bool = True) -> None:
        """Stop the timer and make one last delivery attempt."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10)
            logging.info("Event flush thread stopped")
        if final_flush and self.pending_count():
            if not self.flush():
                logging.warning(f"Final flush incomplete, {self.pending_count()} events left undelivered")

    def _flush_worker(self) -> None:
        while not self._stop_event.wait(self.flush_interval):
            try:
                self.flush()
            except Exception as e:
                logging.error(f"Error in flush worker: {e}")
