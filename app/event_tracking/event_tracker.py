"""
Event Tracker

Validates engagement events and hands them to the visitor's preference
learner.
"""

import logging

from personalization_service import EngagementSignal
from app.personalization.services import PersonalizationManager
from .models import EventPayload

logger = logging.getLogger(__name__)


class EventTracker:
    """Routes engagement events to the preference learner."""

    def __init__(self, manager: PersonalizationManager):
        """Initialize the event tracker.

        Args:
            manager: Registry of per-visitor personalization services
        """
        self.manager = manager

    def process_event_payload(self, uid: str, payload: EventPayload) -> bool:
        """Process an engagement event from the frontend.

        Args:
            uid: Visitor identifier
            payload: Event payload from frontend

        Returns:
            True if the category was promoted to favorite, False otherwise
        """
        if not payload.validate():
            logger.debug(f"Dropping invalid event payload from {uid}: {payload}")
            return False

        if not EngagementSignal.is_valid(payload.type):
            logger.debug(f"Dropping unknown engagement signal from {uid}: {payload.type}")
            return False

        service = self.manager.get_service(uid)
        return service.record_engagement(payload.category.strip(), payload.type)
