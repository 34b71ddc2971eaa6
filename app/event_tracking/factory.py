"""
Factory for creating event tracking module.
"""
from app.personalization.services import PersonalizationManager
from .routes import create_event_tracking_blueprint
from .event_tracker import EventTracker


def create_event_tracking_module(manager: PersonalizationManager) -> dict:
    """Create event tracking module with service and routes.

    Args:
        manager: Registry of per-visitor personalization services

    Returns:
        Dictionary containing the service and blueprint
    """
    event_tracker = EventTracker(manager)
    blueprint = create_event_tracking_blueprint(event_tracker)

    return {
        "service": event_tracker,
        "blueprint": blueprint
    }
