"""
Preference learner.

Promotes a category to favorite once the visitor has read enough. The
engagement signal is validated and logged but does not change the outcome:
every signal counts the same.
"""

import logging
from enum import Enum

from .preference_store import PreferenceStore

logger = logging.getLogger(__name__)


class EngagementSignal(Enum):
    """Allowed engagement signals."""

    READ = "read"
    LIKED = "liked"
    SHARED = "shared"
    BOOKMARKED = "bookmarked"

    @classmethod
    def is_valid(cls, signal: str) -> bool:
        """Check if a signal string is valid."""
        try:
            cls(signal)
            return True
        except ValueError:
            return False

    @classmethod
    def get_allowed_types(cls) -> set[str]:
        return {s.value for s in cls}


class PreferenceLearner:
    """One-way promotion of categories into the favorites list."""

    def __init__(
        self,
        preference_store: PreferenceStore,
        min_reads: int = 3,
        history_ratio: float = 0.1,
    ):
        self.preference_store = preference_store
        self.min_reads = min_reads
        self.history_ratio = history_ratio

    def record_engagement(self, category: str, signal: "EngagementSignal | str") -> bool:
        """Record engagement with a category.

        Returns:
            True if the category was promoted to favorite by this call

        Raises:
            ValueError: unknown signal
        """
        signal = EngagementSignal(signal)
        prefs = self.preference_store.load()
        if not category or category in prefs.favorite_categories:
            return False

        read_count = len(prefs.reading_history)
        threshold = max(self.min_reads, read_count * self.history_ratio)
        if read_count < threshold:
            return False

        self.preference_store.save(
            {"favorite_categories": prefs.favorite_categories + [category]}
        )
        logger.info(f"Promoted category {category!r} to favorite after {signal.value} ({read_count} reads)")
        return True
