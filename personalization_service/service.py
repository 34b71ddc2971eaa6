"""
service.py - Unified personalization service interface
"""

import json
import logging
from datetime import datetime
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional

from .engagement import compute_reading_stats
from .learner import EngagementSignal, PreferenceLearner
from .models import ContentItem, Preferences, ReadingStats
from .catalog import parse_catalog
from .preference_store import PreferenceStore
from .reading_timer import EngagementSnapshot, ReadingTimer
from .recommendations import RecommendationEngine, RecommendationRanker
from .session_tracker import SessionTracker, local_now
from .storage import KeyValueStore

_LOG = logging.getLogger("personalization_service")


class PersonalizationService:
    """Composition root for one visitor's personalization state.

    Owns the preference store (and its cache), the session tracker, the
    ranker and the learner. At most one reading session is tracked at a
    time. Every public call holds the service lock, so concurrent callers
    never interleave a load/merge/write cycle.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = local_now,
        history_limit: int = 100,
        completion_threshold: float = 90,
        history_threshold: float = 20,
        recommendation_limit: int = 10,
        favorite_category_min_reads: int = 3,
        session_retention_days: int = 365,
        engine: Optional[RecommendationEngine] = None,
    ):
        self.clock = clock
        self.preferences = PreferenceStore(store, history_limit=history_limit)
        self.tracker = SessionTracker(
            store,
            self.preferences,
            clock=clock,
            completion_threshold=completion_threshold,
            history_threshold=history_threshold,
            retention_days=session_retention_days,
        )
        self.ranker = RecommendationRanker(engine, limit=recommendation_limit)
        self.learner = PreferenceLearner(self.preferences, min_reads=favorite_category_min_reads)
        self.active_session_id: Optional[str] = None
        self._lock = RLock()

    @classmethod
    def from_config(cls, store: KeyValueStore, config, **kwargs) -> "PersonalizationService":
        """Build a service from a ``PersonalizationConfig``."""
        return cls(
            store,
            history_limit=config.history_limit,
            completion_threshold=config.completion_threshold,
            history_threshold=config.history_threshold,
            recommendation_limit=config.recommendation_limit,
            favorite_category_min_reads=config.favorite_category_min_reads,
            session_retention_days=config.session_retention_days,
            **kwargs,
        )

    # Preferences -------------------------------------------------------------

    def get_preferences(self) -> Preferences:
        with self._lock:
            return self.preferences.load()

    def update_preferences(self, patch: Dict[str, Any]) -> Preferences:
        with self._lock:
            return self.preferences.save(patch)

    def toggle_bookmark(self, content_id: str) -> bool:
        with self._lock:
            return self.preferences.toggle_bookmark(content_id)

    def is_bookmarked(self, content_id: str) -> bool:
        with self._lock:
            return self.preferences.is_bookmarked(content_id)

    # Reading sessions --------------------------------------------------------

    def start_reading(self, content_id: str) -> str:
        """Start tracking a new session, ending the previously tracked one."""
        with self._lock:
            if self.active_session_id:
                self.tracker.end_session(self.active_session_id)
            self.active_session_id = self.tracker.start_session(content_id)
            return self.active_session_id

    def update_reading_progress(self, progress_percentage: float) -> None:
        with self._lock:
            if self.active_session_id:
                self.tracker.update_progress(self.active_session_id, progress_percentage)

    def end_reading(self) -> None:
        with self._lock:
            if self.active_session_id:
                self.tracker.end_session(self.active_session_id)
                self.active_session_id = None

    def close(self) -> None:
        """Host teardown: end whatever session is still tracked."""
        self.end_reading()

    def reading_timer(
        self,
        content: str = "",
        on_update: Optional[Callable[[EngagementSnapshot], None]] = None,
        **kwargs,
    ) -> ReadingTimer:
        """Build a timer whose ticks report scroll progress to the tracked session.

        Ticks arrive only while the timer is RUNNING (session active, page
        visible); ticks after the session ended are ignored by the tracker.
        """
        def forward(snapshot: EngagementSnapshot) -> None:
            self.update_reading_progress(snapshot.scroll_progress)
            if on_update:
                on_update(snapshot)

        return ReadingTimer(content, on_update=forward, **kwargs)

    # Read-time computations --------------------------------------------------

    def get_recommendations(self, catalog: Iterable[Any]) -> List[ContentItem]:
        items = parse_catalog(catalog)
        with self._lock:
            preferences = self.preferences.load()
        return self.ranker.rank(preferences, items, now=self.clock())

    def get_reading_stats(self) -> ReadingStats:
        with self._lock:
            sessions = self.tracker.sessions()
        return compute_reading_stats(sessions.values(), now=self.clock())

    def record_engagement(self, category: str, signal: "EngagementSignal | str") -> bool:
        with self._lock:
            return self.learner.record_engagement(category, signal)

    # Data export / erase -----------------------------------------------------

    def export_data(self) -> str:
        """Serialize preferences, sessions and stats as a JSON snapshot."""
        with self._lock:
            preferences = self.preferences.load()
            sessions = self.tracker.sessions()
        snapshot = {
            "preferences": preferences.to_dict(),
            "sessions": {sid: s.to_dict() for sid, s in sessions.items()},
            "stats": compute_reading_stats(sessions.values(), now=self.clock()).to_dict(),
            "exportDate": self.clock().isoformat(),
        }
        return json.dumps(snapshot, ensure_ascii=False, indent=2)

    def clear_data(self) -> None:
        """Erase preferences and sessions, and forget the tracked session."""
        with self._lock:
            self.preferences.clear()
            self.tracker.clear()
            self.active_session_id = None
        _LOG.info("Cleared personalization data")
