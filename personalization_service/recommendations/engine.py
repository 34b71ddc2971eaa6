"""
Reusable recommendation engine primitives.

This module intentionally lives inside personalization_service/ so it can be
shared by the web application or any future batch job without introducing
Flask dependencies. Each scoring signal is a separate strategy; the engine
sums them, so the default heuristic can be replaced by a normalized scorer
without touching callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..models import ContentItem, Preferences


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class RecommendationContext:
    """Context block passed to recommendation strategies."""

    candidates: Sequence[ContentItem]
    preferences: Preferences
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class StrategyScore:
    """Per-strategy score for a single entry."""

    value: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class RecommendationScore:
    """Aggregated score information returned to callers."""

    score: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class RecommendationResponse:
    """Container for engine output."""

    scores: Dict[str, RecommendationScore]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class RecommendationStrategy(Protocol):
    """Interface for plug-and-play recommendation strategies."""

    name: str

    def score(self, context: RecommendationContext) -> Dict[str, StrategyScore]:
        """Return per-entry strategy scores."""


class RecommendationEngine:
    """Aggregates multiple strategies and returns sortable scores."""

    def __init__(self, strategies: Sequence[RecommendationStrategy]):
        if not strategies:
            raise ValueError("At least one recommendation strategy is required.")
        self.strategies = list(strategies)

    def recommend(self, context: RecommendationContext) -> RecommendationResponse:
        aggregated: Dict[str, RecommendationScore] = {}

        for strategy in self.strategies:
            partial_scores = strategy.score(context)
            for entry_id, strategy_score in partial_scores.items():
                if strategy_score.value <= 0:
                    continue
                current = aggregated.setdefault(entry_id, RecommendationScore(score=0.0))
                current.score += strategy_score.value
                current.breakdown[strategy.name] = (
                    current.breakdown.get(strategy.name, 0.0) + strategy_score.value
                )
                if strategy_score.metadata:
                    current.metadata[strategy.name] = strategy_score.metadata

        return RecommendationResponse(scores=aggregated)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class CategoryPreferenceStrategy:
    """Flat bonus for entries in one of the visitor's favorite categories."""

    name = "category_preference"

    def __init__(self, bonus: float = 10.0):
        self.bonus = bonus

    def score(self, context: RecommendationContext) -> Dict[str, StrategyScore]:
        favorites = set(context.preferences.favorite_categories)
        return {
            item.id: StrategyScore(value=self.bonus, metadata={"category": item.category})
            for item in context.candidates
            if item.category and item.category in favorites
        }


class TagPreferenceStrategy:
    """Bonus per tag shared with the visitor's favorite tags."""

    name = "tag_preference"

    def __init__(self, per_tag: float = 5.0):
        self.per_tag = per_tag

    def score(self, context: RecommendationContext) -> Dict[str, StrategyScore]:
        favorites = set(context.preferences.favorite_tags)
        scores: Dict[str, StrategyScore] = {}
        for item in context.candidates:
            matched = [tag for tag in item.tags if tag in favorites]
            if matched:
                scores[item.id] = StrategyScore(
                    value=len(matched) * self.per_tag,
                    metadata={"matched_tags": matched},
                )
        return scores


class PopularityStrategy:
    """Raw likes and views, unnormalized."""

    name = "popularity"

    def __init__(self, likes_divisor: float = 10.0, views_divisor: float = 100.0):
        self.likes_divisor = likes_divisor
        self.views_divisor = views_divisor

    def score(self, context: RecommendationContext) -> Dict[str, StrategyScore]:
        return {
            item.id: StrategyScore(
                value=item.likes / self.likes_divisor + item.views / self.views_divisor
            )
            for item in context.candidates
        }


class RecencyStrategy:
    """Stacked bonuses for content published within a week and within a day."""

    name = "recency"

    def __init__(self, week_bonus: float = 5.0, day_bonus: float = 5.0):
        self.week_bonus = week_bonus
        self.day_bonus = day_bonus

    def score(self, context: RecommendationContext) -> Dict[str, StrategyScore]:
        scores: Dict[str, StrategyScore] = {}
        for item in context.candidates:
            age = _age(item.created_at, context.now)
            if age is None:
                continue
            value = 0.0
            if age < timedelta(days=7):
                value += self.week_bonus
            if age < timedelta(days=1):
                value += self.day_bonus
            if value:
                scores[item.id] = StrategyScore(value=value, metadata={"age_days": age / timedelta(days=1)})
        return scores


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


class RecommendationRanker:
    """Ranks unread catalog items for a visitor."""

    def __init__(self, engine: Optional[RecommendationEngine] = None, limit: int = 10):
        self.engine = engine or build_default_engine()
        self.limit = limit

    def rank(
        self,
        preferences: Preferences,
        catalog: Sequence[ContentItem],
        now: Optional[datetime] = None,
    ) -> List[ContentItem]:
        """Return up to ``limit`` unread items, best first.

        Items already in the reading history are never returned. Ties keep
        catalog order.
        """
        read = set(preferences.reading_history)
        candidates = [item for item in catalog if item.id not in read]
        context = RecommendationContext(
            candidates=candidates,
            preferences=preferences,
            now=now or datetime.now(timezone.utc),
        )
        response = self.engine.recommend(context)

        scored = []
        for item in candidates:
            rec = response.scores.get(item.id)
            scored.append(item.model_copy(update={
                "recommendation_score": rec.score if rec else 0.0,
                "recommendation_breakdown": dict(rec.breakdown) if rec else {},
            }))
        # sorted() is stable, so equal scores keep catalog order
        scored.sort(key=lambda item: item.recommendation_score, reverse=True)
        return scored[: self.limit]


# ---------------------------------------------------------------------------
# Helpers & defaults
# ---------------------------------------------------------------------------


def _age(created_at: Optional[datetime], now: datetime) -> Optional[timedelta]:
    if created_at is None:
        return None
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - created_at


def build_default_engine() -> RecommendationEngine:
    """Factory for the default engine: category, tags, popularity and recency."""
    return RecommendationEngine(
        strategies=[
            CategoryPreferenceStrategy(),
            TagPreferenceStrategy(),
            PopularityStrategy(),
            RecencyStrategy(),
        ]
    )
