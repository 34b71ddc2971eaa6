"""
Data models for the personalization service.
"""

from .preferences import (
    HISTORY_LIMIT,
    CamelModel,
    NotificationSettings,
    Preferences,
    ReadingGoals,
    ViewPreferences,
)
from .session import CategoryCount, ReadingSession, ReadingStats, SessionState
from .content import ContentItem

__all__ = [
    "HISTORY_LIMIT",
    "CamelModel",
    "NotificationSettings",
    "Preferences",
    "ReadingGoals",
    "ViewPreferences",
    "CategoryCount",
    "ReadingSession",
    "ReadingStats",
    "SessionState",
    "ContentItem",
]
