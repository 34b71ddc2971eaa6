"""
Personalization services: per-visitor engine registry.
"""
import logging
import re
from pathlib import Path
from collections import OrderedDict
from threading import Lock
from typing import Callable, Optional

from flask import request

from config_manager import PersonalizationConfig
from personalization_service import ContentCatalog, JsonFileStore, PersonalizationService

logger = logging.getLogger(__name__)

_UID_PATTERN = re.compile(r"[A-Za-z0-9_.@-]{1,64}")


class PersonalizationManager:
    """Holds one PersonalizationService per visitor, keyed by the uid cookie.

    At most ``max_services`` visitors are kept; the least recently used one
    is closed and dropped when a new visitor arrives. Its records stay on
    disk and are reloaded on the next request.
    """

    def __init__(
        self,
        user_data_dir: Path,
        catalog: ContentCatalog,
        config: PersonalizationConfig,
        service_factory: Optional[Callable[[str], PersonalizationService]] = None,
        max_services: int = 1024,
    ):
        self.user_data_dir = user_data_dir
        self.catalog = catalog
        self.config = config
        self._service_factory = service_factory or self._default_service
        self.max_services = max_services
        self._services: "OrderedDict[str, PersonalizationService]" = OrderedDict()
        self._lock = Lock()

    def get_current_user_id(self) -> Optional[str]:
        """Get the current visitor ID from cookies."""
        return request.cookies.get("uid")

    def require_auth_json(self) -> tuple[Optional[str], Optional[dict]]:
        """Resolve the visitor for JSON endpoints, return error if missing."""
        uid = (self.get_current_user_id() or "").strip()
        if not uid:
            return None, {"error": "no-uid"}
        if not _UID_PATTERN.fullmatch(uid) or uid in (".", ".."):
            return None, {"error": "invalid-uid"}
        return uid, None

    def get_service(self, uid: str) -> PersonalizationService:
        """Get (or create) the personalization engine for a visitor."""
        evicted = []
        with self._lock:
            service = self._services.get(uid)
            if service is None:
                service = self._service_factory(uid)
                self._services[uid] = service
                logger.debug(f"Created personalization service for {uid}")
                while len(self._services) > self.max_services:
                    evicted.append(self._services.popitem(last=False))
            else:
                self._services.move_to_end(uid)
        for old_uid, old_service in evicted:
            logger.debug(f"Evicting personalization service for {old_uid}")
            old_service.close()
        return service

    def forget(self, uid: str) -> None:
        """Close and drop a visitor's engine."""
        with self._lock:
            service = self._services.pop(uid, None)
        if service:
            service.close()

    def close_all(self) -> None:
        with self._lock:
            services = list(self._services.values())
            self._services.clear()
        for service in services:
            service.close()

    def _default_service(self, uid: str) -> PersonalizationService:
        store = JsonFileStore(self.user_data_dir / uid)
        return PersonalizationService.from_config(store, self.config)
