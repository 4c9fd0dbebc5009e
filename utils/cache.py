"""
In-process TTL cache for read-heavy catalog lookups.

Injected into the catalog operations as a collaborator; the booking core
itself never reads through it.
"""
import logging
import threading
import time
from typing import Any, Callable, Optional

from cachetools import TLRUCache

logger = logging.getLogger(__name__)

_MISSING = object()


def _expires_at(_key, entry, now):
    ttl, _value = entry
    return now + ttl


class TTLCache:
    """Key -> value store where every entry expires after its TTL."""

    def __init__(self, default_ttl: int = 300, maxsize: int = 1024,
                 clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        # entries are stored as (ttl, value) so each key can carry its own TTL
        self._entries = TLRUCache(maxsize=maxsize, ttu=_expires_at, timer=clock)
        # cachetools caches are not thread-safe
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key, _MISSING)
        if entry is _MISSING:
            logger.debug("Cache MISS: %s", key)
            return default
        logger.debug("Cache HIT: %s", key)
        return entry[1]

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = (ttl, value)
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("Cache cleared")

    def get_or_set(self, key: str, loader: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = loader()
            self.set(key, value, ttl)
        return value

    def __len__(self):
        with self._lock:
            self._entries.expire()
            return len(self._entries)
