"""
Key/value storage backends for persisted personalization records.

Each record is a JSON document stored under a short key. The file backend
keeps one ``<key>.json`` file per record inside a per-visitor directory.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .errors import MalformedRecord, StorageUnavailable

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "user_preferences"
SESSIONS_KEY = "reading_sessions"


class KeyValueStore(Protocol):
    """Minimal durable string store."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    def remove(self, key: str) -> None:
        """Remove a key; removing a missing key is not an error."""


class JsonFileStore:
    """Stores each record as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {key}: {e}") from e

    def set(self, key: str, value: str) -> None:
        # Temp file plus rename: readers never see a partial record
        temp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix=f"{key}.", suffix=".tmp", dir=self.directory)
            temp_path = Path(temp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(temp_path, self._path(key))
            temp_path = None
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {key}: {e}") from e
        finally:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot remove {key}: {e}") from e


class MemoryStore:
    """In-memory store, mostly for tests and ephemeral visitors.

    ``fail_reads`` / ``fail_writes`` simulate a disabled or full storage.
    """

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageUnavailable(f"Cannot read {key}: storage disabled")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailable(f"Cannot write {key}: quota exceeded")
        self.data[key] = value

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageUnavailable(f"Cannot remove {key}: storage disabled")
        self.data.pop(key, None)


def read_json_record(store: KeyValueStore, key: str) -> Optional[Dict[str, Any]]:
    """Read and decode a JSON object record.

    Returns None when the record does not exist.

    Raises:
        StorageUnavailable: the backend failed
        MalformedRecord: the value is not a JSON object
    """
    raw = store.get(key)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedRecord(f"Record {key} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedRecord(f"Record {key} is not a JSON object")
    return data


def write_json_record(store: KeyValueStore, key: str, data: Dict[str, Any]) -> None:
    """Encode and persist a JSON object record."""
    store.set(key, json.dumps(data, ensure_ascii=False, indent=2))
