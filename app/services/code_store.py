"""Keyed in-memory store of short-lived codes with expiry and bounded size.

Instances are created by the application and injected where needed (see
``app.main`` and ``app.api.v1.auth.get_code_store``); there is no module-level store.
"""

import hmac
import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class ExpiringCodeStore:
    """
    Map of key -> code on top of a TTLCache.

    Keys are normalized (trimmed, lower-cased), so e-mail addresses match
    case-insensitively. Entries expire ttl after they were last written; when the store
    is full, the least recently used entry is evicted. TTLCache is not thread-safe, so
    every access goes through one lock.
    """

    def __init__(
        self,
        ttl: timedelta,
        max_entries: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl
        self._cache = TTLCache(
            maxsize=max_entries, ttl=ttl.total_seconds(), timer=timer
        )
        self._lock = threading.Lock()

    @staticmethod
    def _key(key: str) -> str:
        return key.strip().lower()

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def put(self, key: str, value: str) -> datetime:
        """Store value under key, replacing any previous one. Returns the wall-clock expiry."""
        with self._lock:
            self._cache[self._key(key)] = value
        return datetime.now(UTC) + self._ttl

    def get(self, key: str) -> str | None:
        """Current value for key, or None if missing or expired."""
        with self._lock:
            return self._cache.get(self._key(key))

    def verify(self, key: str, value: str, consume: bool = True) -> bool:
        """True if key holds value and has not expired. A match is removed unless consume=False."""
        k = self._key(key)
        with self._lock:
            stored = self._cache.get(k)
            if stored is None:
                return False
            if not hmac.compare_digest(stored.encode("utf-8"), value.encode("utf-8")):
                return False
            if consume:
                self._cache.pop(k, None)
            return True

    def remove(self, key: str) -> None:
        with self._lock:
            self._cache.pop(self._key(key), None)

    def evict_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            removed = len(self._cache.expire())
        if removed:
            logger.debug("Code store evicted %s expired entries", removed)
        return removed
