"""
Personalization subsystem: preferences, reading sessions, stats and
recommendations over HTTP.
"""

from .services import PersonalizationManager

__all__ = ["PersonalizationManager"]
