"""
Content catalog item model.

Items come from the external content store; only the fields used for
scoring are typed, everything else (title, slug, excerpt, ...) passes
through.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from .preferences import CamelModel


class ContentItem(CamelModel):
    """Published article as seen by the recommendation ranker."""

    model_config = ConfigDict(extra="allow")

    id: str
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    likes: float = 0
    views: float = 0
    created_at: Optional[datetime] = None
    recommendation_score: Optional[float] = None
    recommendation_breakdown: Optional[Dict[str, float]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _str_id(cls, value):
        return str(value) if value is not None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, value):
        return value or []

    @field_validator("likes", "views", mode="before")
    @classmethod
    def _none_counts(cls, value):
        return value or 0
