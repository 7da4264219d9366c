"""
Timestamped session cache.

Entries are stored as JSON `{"ts": <epoch ms>, "data": <value>}` strings in
session storage. A read returns the value only while it is younger than the
TTL (`PORTAL_BOOKMARK_CACHE_TTL_SECONDS` unless given); missing, expired or
corrupt entries read as None.
"""

import json
import logging
import time
from typing import Any, Callable, Optional

from portal.client.config import client_settings
from portal.client.storage import MemoryStorage

logger = logging.getLogger(__name__)

BOOKMARKS_CACHE_KEY = "ksp_bookmarks_cache_v1"


class SessionCache:
    def __init__(
        self,
        storage: MemoryStorage,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage
        self.ttl_seconds = client_settings.BOOKMARK_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.clock = clock

    def write(self, key: str, data: Any) -> None:
        self.storage.set_item(key, json.dumps({"ts": int(self.clock() * 1000), "data": data}))

    def read(self, key: str) -> Optional[Any]:
        raw = self.storage.get_item(key)
        if raw is None:
            return None
        try:
            entry = json.loads(raw)
            age_ms = self.clock() * 1000 - float(entry["ts"])
            data = entry["data"]
        except (ValueError, TypeError, KeyError) as e:
            logger.debug(f"Ignoring corrupt cache entry {key}: {e}")
            return None
        if age_ms >= self.ttl_seconds * 1000:
            return None
        return data
