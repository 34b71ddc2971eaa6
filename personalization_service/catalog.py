"""
Content catalog adapters.

The catalog is owned by the content store; this module only reads it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Protocol

from pydantic import ValidationError

from .models import ContentItem

logger = logging.getLogger(__name__)


class ContentCatalog(Protocol):
    def list_all(self) -> List[ContentItem]:
        """Return every published content item."""


def parse_catalog(raw_items: Iterable[Any]) -> List[ContentItem]:
    """Validate raw post dictionaries, skipping entries without an id."""
    items: List[ContentItem] = []
    for raw in raw_items:
        if isinstance(raw, ContentItem):
            items.append(raw)
            continue
        if not isinstance(raw, dict):
            continue
        data = dict(raw)
        if "id" not in data and "_id" in data:
            data["id"] = data["_id"]
        try:
            items.append(ContentItem.model_validate(data))
        except ValidationError as e:
            logger.warning(f"Skipping invalid catalog entry: {e}")
    return items


class StaticCatalog:
    """Catalog backed by an in-memory list."""

    def __init__(self, items: Iterable[Any] = ()):
        self._items = parse_catalog(items)

    def list_all(self) -> List[ContentItem]:
        return list(self._items)


class JsonFileCatalog:
    """Catalog read from a JSON array of posts (re-read on every call)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def list_all(self) -> List[ContentItem]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(f"Catalog file not found: {self.path}")
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading catalog {self.path}: {e}")
            return []

        if isinstance(data, dict):
            data = data.get("posts", [])
        if not isinstance(data, list):
            logger.error(f"Catalog {self.path} does not contain a list of posts")
            return []
        return parse_catalog(data)
