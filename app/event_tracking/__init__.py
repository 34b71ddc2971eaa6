"""
Event Tracking Subsystem

Receives engagement signals from the frontend and feeds them to the
preference learner.
"""

from .event_tracker import EventTracker
from .models import EventPayload

__all__ = ['EventTracker', 'EventPayload']
