"""
Event Tracking Routes

Flask routes for handling engagement event endpoints.
"""

import json
import logging
from flask import Blueprint, request, jsonify

from personalization_service import EngagementSignal
from .event_tracker import EventTracker
from .models import EventPayload

logger = logging.getLogger(__name__)


def create_event_tracking_blueprint(event_tracker: EventTracker):
    """Create a Flask blueprint for event tracking routes.

    Args:
        event_tracker: Tracker that forwards events to the learner

    Returns:
        Flask blueprint with event tracking routes
    """
    bp = Blueprint('event_tracking', __name__)

    @bp.route("/event", methods=["POST"])
    def ingest_event():
        """Ingest an engagement event from the frontend."""
        uid, error = event_tracker.manager.require_auth_json()
        if error:
            return jsonify(error), 400

        payload_data = request.get_json(silent=True)
        if payload_data is None:
            raw = request.get_data(as_text=True) or "{}"
            try:
                payload_data = json.loads(raw)
            except json.JSONDecodeError:
                payload_data = {}
        if not isinstance(payload_data, dict):
            payload_data = {}

        payload = EventPayload.from_dict(payload_data)
        promoted = event_tracker.process_event_payload(uid, payload)

        # Invalid events are filtered out but don't cause an error response
        return jsonify({"status": "ok", "promoted": promoted})

    @bp.route("/event/types", methods=["GET"])
    def event_types():
        """List the accepted engagement signals."""
        return jsonify({"types": sorted(EngagementSignal.get_allowed_types())})

    return bp
