"""
In-memory chat sessions.

Sessions expire after a fixed inactivity window. A background sweeper
thread frees them; nothing here is ever persisted.
"""

import logging
import threading
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from verdant.domain.chat import ChatMessage

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 30 * 60
SWEEP_INTERVAL_SECONDS = 5 * 60


@dataclass
class Session:
    id: str
    created_at: float
    last_accessed_at: float
    history: list[ChatMessage] = field(default_factory=list)


class SessionStore:
    """Thread-safe map of session id to conversation history."""

    def __init__(
        self,
        ttl: float = SESSION_TTL_SECONDS,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_or_create(self, session_id: str | None = None) -> Session:
        session_id = session_id or str(uuid.uuid4())
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(id=session_id, created_at=now, last_accessed_at=now)
                self._sessions[session_id] = session
            session.last_accessed_at = now
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def append(self, session_id: str, message: ChatMessage) -> list[ChatMessage]:
        """Append a message and return a snapshot of the history."""
        session = self.get_or_create(session_id)
        with self._lock:
            session.history.append(message)
            return list(session.history)

    def replace_history(self, session_id: str, history: Sequence[ChatMessage]) -> None:
        """Write a finished loop's history back, if the session still exists."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return
            session.history = list(history)
            session.last_accessed_at = self._clock()

    def clear(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def clear_all(self) -> None:
        with self._lock:
            self._sessions.clear()

    def sweep(self) -> int:
        """Drop sessions idle longer than the TTL; returns how many."""
        cutoff = self._clock() - self._ttl
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items() if s.last_accessed_at < cutoff
            ]
            for sid in expired:
                del self._sessions[sid]
        for sid in expired:
            logger.info("Session %s... expired after inactivity", sid[:8])
        return len(expired)

    # -------------------------------------------------------------------------
    # Sweeper thread
    # -------------------------------------------------------------------------

    def start(self) -> None:
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop.clear()
        self._sweeper = threading.Thread(
            target=self._run_sweeper, name="session-sweeper", daemon=True
        )
        self._sweeper.start()

    def stop(self) -> None:
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=5)
            self._sweeper = None

    def _run_sweeper(self) -> None:
        while not self._stop.wait(self._sweep_interval):
            self.sweep()
