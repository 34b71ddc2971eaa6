"""
Preference store.

Durable record of a visitor's settings and accumulated lists, cached in
memory per instance. Storage failures never reach the caller: they are
logged and the in-memory copy keeps serving.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .errors import InvalidPreferences, MalformedRecord, StorageUnavailable
from .models import HISTORY_LIMIT, Preferences
from .storage import PREFERENCES_KEY, KeyValueStore, read_json_record, write_json_record

logger = logging.getLogger(__name__)

# alias or field name -> field name
_FIELD_NAMES = {
    **{name: name for name in Preferences.model_fields},
    **{field.alias: name for name, field in Preferences.model_fields.items() if field.alias},
}


class PreferenceStore:
    """Loads, caches and persists the preferences record."""

    def __init__(self, store: KeyValueStore, history_limit: int = HISTORY_LIMIT):
        self.store = store
        self.history_limit = max(1, min(history_limit, HISTORY_LIMIT))
        self._cache: Optional[Preferences] = None

    def load(self) -> Preferences:
        """Return the cached preferences, reading the persisted record on first use.

        The persisted record is merged field by field over the defaults so
        fields added later always have a value. A missing, unreadable or
        corrupt record yields the defaults.
        """
        if self._cache is None:
            self._cache = self._read()
        return self._cache.model_copy(deep=True)

    def save(self, patch: Dict[str, Any]) -> Preferences:
        """Shallow-merge a patch over the current preferences and persist it.

        Args:
            patch: Partial preferences, snake_case or camelCase keys

        Returns:
            The merged preferences

        Raises:
            InvalidPreferences: the merged value fails validation
        """
        current = self.load()
        merged = current.model_dump()
        for key, value in patch.items():
            name = _FIELD_NAMES.get(key)
            if name is None:
                logger.debug(f"Ignoring unknown preference field: {key}")
                continue
            merged[name] = value
        try:
            updated = Preferences.model_validate(merged)
        except ValidationError as e:
            raise InvalidPreferences(str(e)) from e

        updated.reading_history = updated.reading_history[: self.history_limit]
        self._cache = updated
        self._write(updated)
        return updated.model_copy(deep=True)

    def add_to_history(self, content_id: str) -> Preferences:
        """Insert a content id at the front of the reading history."""
        history = [cid for cid in self.load().reading_history if cid != content_id]
        history.insert(0, content_id)
        return self.save({"reading_history": history[: self.history_limit]})

    def toggle_bookmark(self, content_id: str) -> bool:
        """Flip bookmark membership and return the new state."""
        bookmarks = self.load().bookmarks
        if content_id in bookmarks:
            bookmarks.remove(content_id)
            bookmarked = False
        else:
            bookmarks.append(content_id)
            bookmarked = True
        self.save({"bookmarks": bookmarks})
        return bookmarked

    def is_bookmarked(self, content_id: str) -> bool:
        return content_id in self.load().bookmarks

    def clear(self) -> None:
        """Erase the persisted record and reset the cache to defaults."""
        self._cache = Preferences()
        try:
            self.store.remove(PREFERENCES_KEY)
        except StorageUnavailable as e:
            logger.warning(f"Failed to clear user preferences: {e}")

    def _read(self) -> Preferences:
        defaults = Preferences()
        try:
            stored = read_json_record(self.store, PREFERENCES_KEY)
        except (StorageUnavailable, MalformedRecord) as e:
            logger.warning(f"Failed to load user preferences: {e}")
            return defaults
        if stored is None:
            return defaults

        try:
            prefs = Preferences.model_validate({**defaults.to_dict(), **stored})
        except ValidationError as e:
            logger.warning(f"Failed to load user preferences: {e}")
            return defaults
        prefs.reading_history = prefs.reading_history[: self.history_limit]
        return prefs

    def _write(self, prefs: Preferences) -> None:
        try:
            write_json_record(self.store, PREFERENCES_KEY, prefs.to_dict())
        except StorageUnavailable as e:
            logger.warning(f"Failed to save user preferences: {e}")
