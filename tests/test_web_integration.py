"""
Integration tests for the personalization HTTP endpoints.
"""

import json
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from config_manager import ConfigManager
from personalization_service import JsonFileCatalog, SessionState, StaticCatalog
from app.main import create_app
from app.personalization.services import PersonalizationManager


@pytest.fixture
def temp_dir():
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path)


@pytest.fixture
def catalog_file(temp_dir):
    now = datetime.now(timezone.utc).isoformat()
    posts = [
        {"id": "post-1", "title": "Azure basics", "category": "cloud", "tags": ["azure"], "likes": 5, "views": 100, "createdAt": now},
        {"id": "post-2", "title": "Flask tips", "category": "python", "tags": ["flask"], "likes": 50, "views": 1000, "createdAt": now},
        {"id": "post-3", "title": "Old news", "category": "misc", "tags": [], "createdAt": "2020-01-01T00:00:00Z"},
    ]
    path = temp_dir / "posts.json"
    path.write_text(json.dumps(posts))
    return path


@pytest.fixture
def app(temp_dir, catalog_file):
    config = ConfigManager(str(temp_dir / "missing.json"))
    app = create_app(
        config,
        user_data_dir=temp_dir / "user_data",
        catalog=JsonFileCatalog(catalog_file),
    )
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    client = app.test_client()
    client.set_cookie("uid", "integration_test_user")
    return client


class TestPersonalizationEndpoints:

    def test_requires_uid(self, app):
        client = app.test_client()
        res = client.get("/preferences")
        assert res.status_code == 400
        assert res.get_json() == {"error": "no-uid"}

    def test_rejects_path_like_uid(self, app):
        client = app.test_client()
        client.set_cookie("uid", "../etc")
        res = client.get("/preferences")
        assert res.status_code == 400
        assert res.get_json() == {"error": "invalid-uid"}

    def test_preferences_defaults_and_update(self, client):
        res = client.get("/preferences")
        assert res.status_code == 200
        assert res.get_json()["theme"] == "system"

        res = client.post("/preferences", json={"theme": "dark", "favoriteTags": ["flask"]})
        assert res.status_code == 200
        assert res.get_json()["favoriteTags"] == ["flask"]
        assert client.get("/preferences").get_json()["theme"] == "dark"

    def test_invalid_preferences_rejected(self, client):
        res = client.post("/preferences", json={"theme": "neon"})
        assert res.status_code == 400
        res = client.post("/preferences", json=["theme"])
        assert res.status_code == 400

    def test_bookmark_toggle(self, client):
        assert client.post("/bookmark/post-1").get_json()["bookmarked"] is True
        assert client.get("/bookmark/post-1").get_json()["bookmarked"] is True
        assert client.post("/bookmark/post-1").get_json()["bookmarked"] is False

    def test_reading_flow_updates_history_and_recommendations(self, client, temp_dir):
        res = client.post("/reading/start", json={"content_id": "post-2"})
        assert res.status_code == 200
        assert res.get_json()["session_id"].startswith("post-2-")

        assert client.post("/reading/progress", json={"progress": 95}).status_code == 200
        assert client.post("/reading/end").status_code == 200

        prefs = client.get("/preferences").get_json()
        assert prefs["readingHistory"] == ["post-2"]

        stats = client.get("/stats").get_json()["stats"]
        assert stats["totalPostsRead"] == 1
        assert stats["completionRate"] == 100

        items = client.get("/recommendations").get_json()["items"]
        ids = [item["id"] for item in items]
        assert "post-2" not in ids
        assert ids[0] == "post-1"
        assert items[0]["title"] == "Azure basics"

        visitor_dir = temp_dir / "user_data" / "integration_test_user"
        assert (visitor_dir / "user_preferences.json").exists()
        assert (visitor_dir / "reading_sessions.json").exists()

    def test_reading_start_requires_content_id(self, client):
        assert client.post("/reading/start", json={}).status_code == 400

    def test_progress_must_be_numeric(self, client):
        client.post("/reading/start", json={"content_id": "post-1"})
        assert client.post("/reading/progress", json={"progress": "lots"}).status_code == 400

    def test_non_finite_progress_rejected_and_session_kept(self, client):
        client.post("/reading/start", json={"content_id": "post-1"})
        for value in ("nan", "inf", "-Infinity"):
            res = client.post("/reading/progress", json={"progress": value})
            assert res.status_code == 400

        assert client.post("/reading/progress", json={"progress": 50}).status_code == 200
        client.post("/reading/end")
        assert client.get("/preferences").get_json()["readingHistory"] == ["post-1"]

    def test_export_and_clear(self, client):
        client.post("/bookmark/post-3")
        res = client.get("/export")
        assert res.status_code == 200
        assert res.mimetype == "application/json"
        data = json.loads(res.get_data(as_text=True))
        assert set(data) == {"preferences", "sessions", "stats", "exportDate"}
        assert data["preferences"]["bookmarks"] == ["post-3"]

        assert client.post("/clear").get_json()["status"] == "ok"
        prefs = client.get("/preferences").get_json()
        assert prefs["bookmarks"] == []
        assert client.get("/stats").get_json()["stats"]["totalPostsRead"] == 0

    def test_visitors_are_isolated(self, app, client):
        client.post("/bookmark/post-1")
        other = app.test_client()
        other.set_cookie("uid", "someone_else")
        assert other.get("/bookmark/post-1").get_json()["bookmarked"] is False

    def test_health(self, client):
        assert client.get("/actuator/health").get_json()["status"] == "UP"


class TestEventEndpoint:

    def test_event_promotes_category(self, client):
        for cid in ("a", "b", "c"):
            client.post("/reading/start", json={"content_id": cid})
            client.post("/reading/progress", json={"progress": 50})
        client.post("/reading/end")

        res = client.post("/event", json={"type": "liked", "category": "misc"})
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok", "promoted": True}
        assert client.get("/preferences").get_json()["favoriteCategories"] == ["misc"]

    def test_invalid_event_still_ok(self, client):
        res = client.post("/event", data="not json", content_type="text/plain")
        assert res.status_code == 200
        assert res.get_json()["promoted"] is False

    def test_event_requires_uid(self, app):
        res = app.test_client().post("/event", json={"type": "read", "category": "x"})
        assert res.status_code == 400

    def test_event_types(self, client):
        types = client.get("/event/types").get_json()["types"]
        assert types == ["bookmarked", "liked", "read", "shared"]


class TestPersonalizationManager:
    """Per-visitor service registry."""

    def _manager(self, temp_dir, max_services):
        config = ConfigManager(str(temp_dir / "missing.json")).get_personalization_config()
        return PersonalizationManager(
            temp_dir / "user_data", StaticCatalog(), config, max_services=max_services
        )

    def test_same_visitor_reuses_service(self, temp_dir):
        manager = self._manager(temp_dir, max_services=2)
        assert manager.get_service("alice") is manager.get_service("alice")

    def test_least_recently_used_visitor_is_evicted_and_closed(self, temp_dir):
        manager = self._manager(temp_dir, max_services=2)
        alice = manager.get_service("alice")
        sid = alice.start_reading("post-1")
        manager.get_service("bob")
        manager.get_service("alice")
        bob = manager.get_service("bob")

        manager.get_service("carol")
        assert len(manager._services) == 2
        assert list(manager._services) == ["bob", "carol"]
        assert alice.active_session_id is None
        assert bob is manager.get_service("bob")

        again = manager.get_service("alice")
        assert again is not alice
        assert again.tracker.state(sid) is SessionState.ENDED

    def test_max_services_comes_from_config(self, app):
        manager = app.extensions["personalization"]
        assert manager.max_services == 1024
