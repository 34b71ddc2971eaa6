"""
Reading session tracker.

Each session moves NONE -> ACTIVE -> ENDED. Sessions are persisted as a
single map of session id to session record; calls against unknown or
already ended sessions are ignored so stale callers cannot corrupt state.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from pydantic import ValidationError

from .errors import MalformedRecord, StorageUnavailable
from .models import ReadingSession, SessionState
from .preference_store import PreferenceStore
from .storage import SESSIONS_KEY, KeyValueStore, read_json_record, write_json_record

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Current time in the local time zone."""
    return datetime.now().astimezone()


class SessionTracker:
    """Tracks reading sessions and feeds finished reads into the history."""

    def __init__(
        self,
        store: KeyValueStore,
        preference_store: PreferenceStore,
        clock: Callable[[], datetime] = local_now,
        completion_threshold: float = 90,
        history_threshold: float = 20,
        retention_days: int = 365,
    ):
        self.store = store
        self.preference_store = preference_store
        self.clock = clock
        self.completion_threshold = completion_threshold
        self.history_threshold = history_threshold
        self.retention_days = retention_days

    def start_session(self, content_id: str) -> str:
        """Open a new session for a content item and return its id."""
        now = self.clock()
        sessions = self.sessions()
        self._prune(sessions, now)

        stamp = int(now.timestamp() * 1000)
        session_id = f"{content_id}-{stamp}"
        while session_id in sessions:
            stamp += 1
            session_id = f"{content_id}-{stamp}"

        sessions[session_id] = ReadingSession(content_id=content_id, start_time=now)
        self._save(sessions)
        logger.debug(f"Started reading session {session_id}")
        return session_id

    def update_progress(self, session_id: str, progress_percentage: float) -> None:
        """Record the latest progress of an active session (last write wins)."""
        sessions = self.sessions()
        session = sessions.get(session_id)
        if session is None or session.state is not SessionState.ACTIVE:
            logger.debug(f"Ignoring progress for inactive session {session_id}")
            return

        pct = float(progress_percentage)
        if not math.isfinite(pct):
            logger.warning(f"Ignoring non-finite progress {progress_percentage!r} for {session_id}")
            return
        pct = min(max(pct, 0.0), 100.0)
        session.progress_percentage = pct
        session.completed = pct >= self.completion_threshold
        self._save(sessions)

    def end_session(self, session_id: str) -> None:
        """Close an active session, adding its content to the history if read enough."""
        sessions = self.sessions()
        session = sessions.get(session_id)
        if session is None or session.state is not SessionState.ACTIVE:
            logger.debug(f"Ignoring end for inactive session {session_id}")
            return

        session.end_time = self.clock()
        self._save(sessions)

        if session.progress_percentage >= self.history_threshold:
            self.preference_store.add_to_history(session.content_id)
        logger.debug(
            f"Ended reading session {session_id} at {session.progress_percentage:.0f}%"
        )

    def state(self, session_id: str) -> SessionState:
        session = self.sessions().get(session_id)
        return session.state if session else SessionState.NONE

    def get_session(self, session_id: str) -> Optional[ReadingSession]:
        return self.sessions().get(session_id)

    def sessions(self) -> Dict[str, ReadingSession]:
        """Load all persisted sessions, skipping entries that fail validation."""
        try:
            raw = read_json_record(self.store, SESSIONS_KEY)
        except (StorageUnavailable, MalformedRecord) as e:
            logger.warning(f"Failed to load reading sessions: {e}")
            return {}
        if not raw:
            return {}

        sessions: Dict[str, ReadingSession] = {}
        for session_id, data in raw.items():
            try:
                sessions[session_id] = ReadingSession.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Skipping malformed reading session {session_id}: {e}")
        return sessions

    def clear(self) -> None:
        try:
            self.store.remove(SESSIONS_KEY)
        except StorageUnavailable as e:
            logger.warning(f"Failed to clear reading sessions: {e}")

    def _prune(self, sessions: Dict[str, ReadingSession], now: datetime) -> None:
        if self.retention_days <= 0:
            return
        cutoff = now - timedelta(days=self.retention_days)
        expired = [sid for sid, s in sessions.items() if s.start_time < cutoff]
        for sid in expired:
            del sessions[sid]
        if expired:
            logger.info(f"Pruned {len(expired)} reading sessions older than {self.retention_days} days")

    def _save(self, sessions: Dict[str, ReadingSession]) -> None:
        try:
            write_json_record(
                self.store,
                SESSIONS_KEY,
                {sid: session.to_dict() for sid, session in sessions.items()},
            )
        except StorageUnavailable as e:
            logger.warning(f"Failed to save reading session: {e}")
