"""
Data Models for Event Tracking

Defines the payload accepted by the engagement event endpoint.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EventPayload:
    """Payload structure for incoming engagement events from frontend."""

    type: str
    category: Optional[str] = None
    content_id: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> bool:
        """Validate the payload structure."""
        return (
            isinstance(self.type, str) and
            isinstance(self.category, str) and bool(self.category.strip()) and
            (self.content_id is None or isinstance(self.content_id, str)) and
            isinstance(self.meta, dict)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventPayload':
        """Create EventPayload from a request body."""
        return cls(
            type=str(data.get("type", "")).strip(),
            category=data.get("category"),
            content_id=data.get("content_id") or data.get("contentId"),
            meta=data.get("meta") or {}
        )
