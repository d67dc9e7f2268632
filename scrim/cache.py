import logging
import time
from collections import OrderedDict

from . import config

logger = logging.getLogger(__name__)


class ResponseCache:
    """Time-boxed cache for read routes, one instance per app.

    Entries older than ``ttl_seconds`` are never served. Once more than
    ``capacity`` entries are held, entries older than twice the TTL are
    dropped first, then the oldest entries until the cache is back at capacity.
    """

    def __init__(self, ttl_seconds=config.CACHE_TTL_SECONDS, capacity=config.CACHE_CAPACITY, clock=time.monotonic):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self._clock = clock
        self._entries = OrderedDict()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key in self._entries

    def get(self, key):
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            return None
        return value

    def set(self, key, value):
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        if len(self._entries) > self.capacity:
            self._evict()

    def _evict(self):
        now = self._clock()
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds * 2]
        for key in expired:
            del self._entries[key]
        while len(self._entries) > self.capacity:
            key, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", key)

    def invalidate(self, key):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()
