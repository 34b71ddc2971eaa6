"""
Preference data models.

This module contains the Pydantic models for a visitor's durable settings
and accumulated lists (reading history, bookmarks, favorites).
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HISTORY_LIMIT = 100


class CamelModel(BaseModel):
    """Base model persisted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json", by_alias=True)


def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


class ReadingGoals(CamelModel):
    """Advisory reading goals, not enforced."""
    daily_minutes: Optional[float] = Field(default=None, description="Minutes per day")
    weekly_posts: Optional[int] = Field(default=None, description="Posts per week")


class NotificationSettings(CamelModel):
    """Notification opt-ins."""
    new_posts: bool = True
    weekly_digest: bool = True
    favorite_authors: bool = True


class ViewPreferences(CamelModel):
    """Listing layout settings."""
    default_view: Literal["grid", "list"] = "grid"
    posts_per_page: int = 9
    show_reading_time: bool = True
    show_author: bool = True


class Preferences(CamelModel):
    """Visitor preferences record."""
    reading_history: List[str] = Field(default_factory=list, description="Content ids, most recent first")
    bookmarks: List[str] = Field(default_factory=list)
    favorite_categories: List[str] = Field(default_factory=list)
    favorite_tags: List[str] = Field(default_factory=list)
    reading_goals: ReadingGoals = Field(default_factory=ReadingGoals)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    theme: Literal["light", "dark", "system"] = "system"
    view_preferences: ViewPreferences = Field(default_factory=ViewPreferences)

    @field_validator("reading_history")
    @classmethod
    def _cap_history(cls, value: List[str]) -> List[str]:
        return _unique(value)[:HISTORY_LIMIT]

    @field_validator("bookmarks", "favorite_categories", "favorite_tags")
    @classmethod
    def _dedupe(cls, value: List[str]) -> List[str]:
        return _unique(value)
