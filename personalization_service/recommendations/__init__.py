"""
Recommendation engine package for personalized content ordering.

Provides a pluggable engine that can be reused by the web layer or any
future batch jobs without creating Flask dependencies.
"""

from .engine import (
    CategoryPreferenceStrategy,
    PopularityStrategy,
    RecencyStrategy,
    RecommendationContext,
    RecommendationEngine,
    RecommendationRanker,
    RecommendationResponse,
    RecommendationScore,
    RecommendationStrategy,
    StrategyScore,
    TagPreferenceStrategy,
    build_default_engine,
)

__all__ = [
    "CategoryPreferenceStrategy",
    "PopularityStrategy",
    "RecencyStrategy",
    "RecommendationContext",
    "RecommendationEngine",
    "RecommendationRanker",
    "RecommendationResponse",
    "RecommendationScore",
    "RecommendationStrategy",
    "StrategyScore",
    "TagPreferenceStrategy",
    "build_default_engine",
]
