"""
Tests for the personalization service composition root.
"""
import json
import threading
from datetime import timedelta

import pytest

from personalization_service import (
    JsonFileStore,
    MemoryStore,
    PersonalizationService,
    Preferences,
    SessionState,
    TimerState,
)
from personalization_service.storage import PREFERENCES_KEY, SESSIONS_KEY


@pytest.fixture
def backend():
    return MemoryStore()


@pytest.fixture
def service(backend, clock):
    return PersonalizationService(backend, clock=clock)


def _read(service, clock, content_id, progress=100, minutes=5):
    service.start_reading(content_id)
    service.update_reading_progress(progress)
    clock.advance(minutes=minutes)
    service.end_reading()


class TestReadingFlow:

    def test_full_read_updates_history_and_stats(self, service, clock):
        _read(service, clock, "post-1", minutes=6)

        assert service.get_preferences().reading_history == ["post-1"]
        stats = service.get_reading_stats()
        assert stats.total_posts_read == 1
        assert stats.total_reading_time == pytest.approx(6)
        assert stats.completion_rate == 100
        assert stats.reading_streak == 1

    def test_progress_without_active_session_is_ignored(self, service, backend):
        service.update_reading_progress(50)
        service.end_reading()
        assert SESSIONS_KEY not in backend.data

    def test_starting_new_session_ends_previous(self, service, clock):
        first = service.start_reading("post-1")
        service.update_reading_progress(30)
        clock.advance(minutes=1)
        second = service.start_reading("post-2")

        assert service.tracker.state(first) is SessionState.ENDED
        assert service.active_session_id == second
        assert service.get_preferences().reading_history == ["post-1"]

    def test_close_ends_tracked_session(self, service):
        sid = service.start_reading("post-1")
        service.close()
        assert service.tracker.state(sid) is SessionState.ENDED
        assert service.active_session_id is None

    def test_streak_over_consecutive_days(self, service, clock):
        for _ in range(3):
            _read(service, clock, "post")
            clock.advance(days=1)
        clock.advance(days=-1)
        assert service.get_reading_stats().reading_streak == 3


class TestBookmarksAndPreferences:

    def test_toggle_bookmark(self, service):
        assert service.toggle_bookmark("post-1") is True
        assert service.is_bookmarked("post-1")
        assert service.toggle_bookmark("post-1") is False
        assert not service.is_bookmarked("post-1")

    def test_update_preferences(self, service):
        prefs = service.update_preferences({"readingGoals": {"dailyMinutes": 20}})
        assert prefs.reading_goals.daily_minutes == 20
        assert service.get_preferences().reading_goals.daily_minutes == 20

    def test_instances_do_not_share_state(self, clock):
        a = PersonalizationService(MemoryStore(), clock=clock)
        b = PersonalizationService(MemoryStore(), clock=clock)
        a.toggle_bookmark("post-1")
        assert not b.is_bookmarked("post-1")


class TestRecommendationsAndLearning:

    def test_recommendations_exclude_history(self, service, clock):
        _read(service, clock, "post-1")
        catalog = [
            {"id": "post-1", "category": "cloud", "likes": 999},
            {"id": "post-2", "category": "cloud"},
        ]
        ranked = service.get_recommendations(catalog)
        assert [item.id for item in ranked] == ["post-2"]

    def test_learned_category_boosts_ranking(self, service, clock):
        for cid in ("a", "b", "c"):
            _read(service, clock, cid)
        assert service.record_engagement("cloud", "read") is True

        catalog = [{"id": "x", "category": "ai"}, {"id": "y", "category": "cloud"}]
        assert [item.id for item in service.get_recommendations(catalog)] == ["y", "x"]


class TestExportAndClear:

    def test_export_contains_all_sections(self, service, clock):
        _read(service, clock, "post-1")
        service.toggle_bookmark("post-9")

        data = json.loads(service.export_data())
        assert set(data) == {"preferences", "sessions", "stats", "exportDate"}
        assert data["preferences"] == service.get_preferences().to_dict()
        assert len(data["sessions"]) == 1
        assert data["stats"]["totalPostsRead"] == 1
        assert data["exportDate"] == clock().isoformat()

    def test_clear_wipes_everything(self, service, backend, clock):
        _read(service, clock, "post-1")
        service.update_preferences({"theme": "dark"})
        service.start_reading("post-2")

        service.clear_data()

        assert PREFERENCES_KEY not in backend.data
        assert SESSIONS_KEY not in backend.data
        assert service.get_preferences() == Preferences()
        assert service.get_reading_stats().total_posts_read == 0
        assert service.active_session_id is None

    def test_storage_failure_degrades_to_memory(self, service, backend, clock):
        backend.fail_writes = True
        service.toggle_bookmark("post-1")
        assert service.is_bookmarked("post-1")
        assert PREFERENCES_KEY not in backend.data


def test_from_config_applies_settings(clock):
    from config_manager import PersonalizationConfig

    config = PersonalizationConfig(
        history_limit=5,
        completion_threshold=80,
        history_threshold=10,
        recommendation_limit=2,
        favorite_category_min_reads=1,
        session_retention_days=0,
    )
    service = PersonalizationService.from_config(MemoryStore(), config, clock=clock)
    assert service.preferences.history_limit == 5
    assert service.tracker.completion_threshold == 80
    assert service.ranker.limit == 2
    assert service.learner.min_reads == 1

    service.start_reading("post")
    service.update_reading_progress(80)
    clock.advance(minutes=1)
    service.end_reading()
    assert service.get_reading_stats().total_posts_read == 1


class TestConcurrentCallers:

    def test_parallel_bookmarks_are_all_persisted(self, tmp_path, clock):
        service = PersonalizationService(JsonFileStore(tmp_path / "visitor"), clock=clock)
        ids = [f"post-{i}" for i in range(400)]
        chunks = [ids[i::8] for i in range(8)]

        def worker(chunk):
            for content_id in chunk:
                service.toggle_bookmark(content_id)

        threads = [threading.Thread(target=worker, args=(chunk,)) for chunk in chunks]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        reloaded = PersonalizationService(JsonFileStore(tmp_path / "visitor"), clock=clock)
        assert sorted(reloaded.get_preferences().bookmarks) == sorted(ids)

    def test_parallel_reads_keep_every_session(self, tmp_path, clock):
        service = PersonalizationService(JsonFileStore(tmp_path / "visitor"), clock=clock)

        def worker(n):
            for i in range(20):
                service.start_reading(f"post-{n}-{i}")
                service.update_reading_progress(100)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        service.end_reading()

        sessions = service.tracker.sessions()
        assert len(sessions) == 100
        assert all(s.state is SessionState.ENDED for s in sessions.values())


class FakeTicker:

    def __init__(self, interval, callback):
        self.callback = callback

    def start(self):
        pass

    def cancel(self):
        pass


class TestReadingTimerHook:

    def test_ticks_report_scroll_progress_to_tracked_session(self, service):
        snapshots = []
        sid = service.start_reading("post-1")
        timer = service.reading_timer(
            "word " * 400, on_update=snapshots.append, ticker_factory=FakeTicker
        )
        timer.start()
        timer.update_scroll(95)
        timer.tick()

        assert len(snapshots) == 1
        session = service.tracker.get_session(sid)
        assert session.progress_percentage == 95
        assert session.completed is True

    def test_suspended_timer_does_not_report(self, service):
        sid = service.start_reading("post-1")
        timer = service.reading_timer(ticker_factory=FakeTicker)
        timer.start()
        timer.update_scroll(50)
        timer.set_visible(False)
        timer.tick()

        assert timer.state is TimerState.SUSPENDED
        assert service.tracker.get_session(sid).progress_percentage == 0

    def test_ticks_after_session_end_are_ignored(self, service):
        sid = service.start_reading("post-1")
        timer = service.reading_timer(ticker_factory=FakeTicker)
        timer.start()
        service.end_reading()
        timer.update_scroll(80)
        timer.tick()

        assert service.tracker.get_session(sid).progress_percentage == 0
