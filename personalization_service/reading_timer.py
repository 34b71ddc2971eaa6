"""
Reading timer.

Accumulates active reading time for the article currently on screen. The
timer only ticks while it is RUNNING (session active and page visible);
suspending it cancels the ticker and resuming schedules a new one.

    IDLE --start--> RUNNING <--suspend/resume--> SUSPENDED
                       |                            |
                       +-----------stop-------------+--> STOPPED
"""

import logging
import math
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUSPENDED = "suspended"
    STOPPED = "stopped"


@dataclass
class EngagementSnapshot:
    """Engagement data reported on every tick."""
    reading_time: int  # estimated minutes
    time_spent: float  # seconds
    scroll_progress: float
    engagement_score: float
    finished: bool


class Ticker(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


class RepeatingTicker:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._timer: Optional[threading.Timer] = None
        self._cancelled = threading.Event()

    def start(self) -> None:
        self._cancelled.clear()
        self._schedule()

    def cancel(self) -> None:
        self._cancelled.set()
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.interval, self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self) -> None:
        if self._cancelled.is_set():
            return
        try:
            self.callback()
        except Exception:
            logger.exception("Reading timer callback failed")
        if not self._cancelled.is_set():
            self._schedule()


def estimate_reading_time(content: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimated reading time in whole minutes (at least one)."""
    words = len(re.split(r"\s+", content.strip())) if content.strip() else 0
    return max(1, math.ceil(words / words_per_minute))


class ReadingTimer:
    """Suspend/resume state machine driving a one-second engagement tick."""

    def __init__(
        self,
        content: str = "",
        on_update: Optional[Callable[[EngagementSnapshot], None]] = None,
        interval: float = 1.0,
        ticker_factory: Callable[[float, Callable[[], None]], Ticker] = RepeatingTicker,
        reading_time: Optional[int] = None,
    ):
        self.reading_time = reading_time or estimate_reading_time(content)
        self.on_update = on_update
        self.interval = interval
        self.ticker_factory = ticker_factory
        self.state = TimerState.IDLE
        self.time_spent = 0.0
        self.scroll_progress = 0.0
        self.snapshots: List[EngagementSnapshot] = []
        self._ticker: Optional[Ticker] = None
        self._lock = threading.Lock()

    @property
    def is_ticking(self) -> bool:
        return self._ticker is not None

    def start(self) -> None:
        with self._lock:
            if self.state is not TimerState.IDLE:
                return
            self._run()

    def suspend(self) -> None:
        """Page hidden or window blurred."""
        with self._lock:
            if self.state is TimerState.RUNNING:
                self._cancel_ticker()
                self.state = TimerState.SUSPENDED

    def resume(self) -> None:
        """Page visible or window focused again."""
        with self._lock:
            if self.state is TimerState.SUSPENDED:
                self._run()

    def set_visible(self, visible: bool) -> None:
        if visible:
            self.resume()
        else:
            self.suspend()

    def stop(self) -> None:
        with self._lock:
            self._cancel_ticker()
            self.state = TimerState.STOPPED

    def update_scroll(self, scroll_progress: float) -> None:
        value = float(scroll_progress)
        if math.isfinite(value):
            self.scroll_progress = min(max(value, 0.0), 100.0)

    def tick(self) -> Optional[EngagementSnapshot]:
        """Advance the timer by one interval; ignored unless RUNNING."""
        with self._lock:
            if self.state is not TimerState.RUNNING:
                return None
            self.time_spent += self.interval
            snapshot = self.snapshot()
            self.snapshots.append(snapshot)
        if self.on_update:
            self.on_update(snapshot)
        return snapshot

    def snapshot(self) -> EngagementSnapshot:
        expected_seconds = self.reading_time * 60
        return EngagementSnapshot(
            reading_time=self.reading_time,
            time_spent=self.time_spent,
            scroll_progress=self.scroll_progress,
            engagement_score=min(self.time_spent / expected_seconds * 100, 100.0),
            finished=self.time_spent >= expected_seconds,
        )

    def _run(self) -> None:
        self._ticker = self.ticker_factory(self.interval, self.tick)
        self._ticker.start()
        self.state = TimerState.RUNNING

    def _cancel_ticker(self) -> None:
        if self._ticker:
            self._ticker.cancel()
            self._ticker = None
