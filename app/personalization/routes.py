"""
Personalization routes for preferences, bookmarks, reading sessions,
statistics and recommendations.
"""
import math

from flask import Blueprint, Response, jsonify, request

from personalization_service import InvalidPreferences
from .services import PersonalizationManager


def create_personalization_routes(manager: PersonalizationManager) -> Blueprint:
    """Create personalization routes."""
    bp = Blueprint('personalization', __name__)

    def _visitor():
        uid, error = manager.require_auth_json()
        if error:
            return None, (jsonify(error), 400)
        return manager.get_service(uid), None

    @bp.route("/preferences", methods=["GET"])
    def get_preferences():
        """Get the visitor's preferences."""
        service, error = _visitor()
        if error:
            return error
        return jsonify(service.get_preferences().to_dict())

    @bp.route("/preferences", methods=["POST"])
    def update_preferences():
        """Merge a partial preferences object."""
        service, error = _visitor()
        if error:
            return error

        patch = request.get_json(silent=True)
        if not isinstance(patch, dict):
            return jsonify({"error": "Expected a JSON object"}), 400
        try:
            prefs = service.update_preferences(patch)
        except InvalidPreferences as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(prefs.to_dict())

    @bp.route("/bookmark/<content_id>", methods=["POST"])
    def toggle_bookmark(content_id):
        """Toggle a bookmark."""
        service, error = _visitor()
        if error:
            return error
        return jsonify({"status": "ok", "bookmarked": service.toggle_bookmark(content_id)})

    @bp.route("/bookmark/<content_id>", methods=["GET"])
    def bookmark_status(content_id):
        """Check whether a content item is bookmarked."""
        service, error = _visitor()
        if error:
            return error
        return jsonify({"bookmarked": service.is_bookmarked(content_id)})

    @bp.route("/reading/start", methods=["POST"])
    def start_reading():
        """Start a reading session for a content item."""
        service, error = _visitor()
        if error:
            return error

        data = request.get_json(silent=True) or {}
        content_id = str(data.get("content_id") or data.get("contentId") or "").strip()
        if not content_id:
            return jsonify({"error": "content_id is required"}), 400
        return jsonify({"status": "ok", "session_id": service.start_reading(content_id)})

    @bp.route("/reading/progress", methods=["POST"])
    def update_progress():
        """Report scroll/read progress for the tracked session."""
        service, error = _visitor()
        if error:
            return error

        data = request.get_json(silent=True) or {}
        try:
            progress = float(data.get("progress"))
        except (TypeError, ValueError):
            return jsonify({"error": "progress must be a number"}), 400
        if not math.isfinite(progress):
            return jsonify({"error": "progress must be a finite number"}), 400
        service.update_reading_progress(progress)
        return jsonify({"status": "ok"})

    @bp.route("/reading/end", methods=["POST"])
    def end_reading():
        """End the tracked session."""
        service, error = _visitor()
        if error:
            return error
        service.end_reading()
        return jsonify({"status": "ok"})

    @bp.route("/recommendations", methods=["GET"])
    def recommendations():
        """Ranked unread content for the visitor."""
        service, error = _visitor()
        if error:
            return error
        items = service.get_recommendations(manager.catalog.list_all())
        return jsonify({"status": "ok", "items": [item.to_dict() for item in items]})

    @bp.route("/stats", methods=["GET"])
    def stats():
        """Reading-habit statistics."""
        service, error = _visitor()
        if error:
            return error
        return jsonify({"status": "ok", "stats": service.get_reading_stats().to_dict()})

    @bp.route("/export", methods=["GET"])
    def export_data():
        """Download every stored record as JSON."""
        service, error = _visitor()
        if error:
            return error
        return Response(
            service.export_data(),
            mimetype="application/json",
            headers={"Content-Disposition": "attachment; filename=reading-data.json"},
        )

    @bp.route("/clear", methods=["POST"])
    def clear_data():
        """Erase every stored record for the visitor."""
        service, error = _visitor()
        if error:
            return error
        service.clear_data()
        return jsonify({"status": "ok"})

    return bp
