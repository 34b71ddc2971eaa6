"""
Reading session and statistics models.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .preferences import CamelModel


class SessionState(Enum):
    """Lifecycle state of a reading session."""
    NONE = "none"
    ACTIVE = "active"
    ENDED = "ended"


class ReadingSession(CamelModel):
    """One continuous act of reading a single content item."""
    content_id: str = Field(description="Content being read")
    start_time: datetime
    end_time: Optional[datetime] = None
    progress_percentage: float = Field(default=0.0, ge=0, le=100)
    completed: bool = False

    @property
    def state(self) -> SessionState:
        return SessionState.ENDED if self.end_time is not None else SessionState.ACTIVE

    def duration_minutes(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds() / 60


class CategoryCount(CamelModel):
    category: str
    count: int


class ReadingStats(CamelModel):
    """Reading-habit statistics derived from the session log."""
    total_posts_read: int = 0
    total_reading_time: float = Field(default=0.0, description="Minutes")
    average_reading_time: float = Field(default=0.0, description="Minutes per completed session")
    completion_rate: float = Field(default=0.0, description="Percentage of ended sessions completed")
    favorite_categories: List[CategoryCount] = Field(default_factory=list)
    reading_streak: int = 0
