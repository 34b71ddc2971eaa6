"""
Engagement aggregation over the reading session log.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Set

from .models import ReadingSession, ReadingStats


def compute_reading_stats(
    sessions: Iterable[ReadingSession], now: Optional[datetime] = None
) -> ReadingStats:
    """Derive reading statistics from all persisted sessions.

    Only sessions that were ended *and* completed count as read. Dates for
    the streak are taken from each session's start time in ``now``'s time
    zone.
    """
    now = now or datetime.now().astimezone()
    ended = [s for s in sessions if s.end_time is not None]
    completed = [s for s in ended if s.completed]

    total_minutes = sum(s.duration_minutes() for s in completed)
    average = total_minutes / len(completed) if completed else 0.0
    completion_rate = len(completed) / len(ended) * 100 if ended else 0.0

    reading_dates = {_local_date(s.start_time, now) for s in completed}

    return ReadingStats(
        total_posts_read=len(completed),
        total_reading_time=total_minutes,
        average_reading_time=average,
        completion_rate=completion_rate,
        favorite_categories=[],  # needs content metadata
        reading_streak=reading_streak(reading_dates, now.date()),
    )


def reading_streak(reading_dates: Set[date], today: date) -> int:
    """Count consecutive reading days ending today or yesterday."""
    day = today
    if day not in reading_dates:
        day = today - timedelta(days=1)
        if day not in reading_dates:
            return 0

    streak = 0
    while day in reading_dates:
        streak += 1
        day -= timedelta(days=1)
    return streak


def _local_date(ts: datetime, now: datetime) -> date:
    if ts.tzinfo is None or now.tzinfo is None:
        return ts.date()
    return ts.astimezone(now.tzinfo).date()
