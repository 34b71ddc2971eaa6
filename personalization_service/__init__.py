# Personalization service package for reading tracking and recommendations

from .errors import (
    InvalidPreferences,
    MalformedRecord,
    PersonalizationError,
    StorageUnavailable,
)
from .models import ContentItem, Preferences, ReadingSession, ReadingStats, SessionState
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .preference_store import PreferenceStore
from .session_tracker import SessionTracker
from .reading_timer import EngagementSnapshot, ReadingTimer, TimerState, estimate_reading_time
from .engagement import compute_reading_stats, reading_streak
from .learner import EngagementSignal, PreferenceLearner
from .catalog import ContentCatalog, JsonFileCatalog, StaticCatalog
from .recommendations import RecommendationRanker, build_default_engine
from .service import PersonalizationService

__all__ = [
    "InvalidPreferences",
    "MalformedRecord",
    "PersonalizationError",
    "StorageUnavailable",
    "ContentItem",
    "Preferences",
    "ReadingSession",
    "ReadingStats",
    "SessionState",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PreferenceStore",
    "SessionTracker",
    "EngagementSnapshot",
    "ReadingTimer",
    "TimerState",
    "estimate_reading_time",
    "compute_reading_stats",
    "reading_streak",
    "EngagementSignal",
    "PreferenceLearner",
    "ContentCatalog",
    "JsonFileCatalog",
    "StaticCatalog",
    "RecommendationRanker",
    "build_default_engine",
    "PersonalizationService",
]
