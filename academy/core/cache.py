"""
Caching Module

Expiring in-memory map used to throttle activity heartbeats: a user's
heartbeat is forwarded to the backend at most once per TTL window.
"""

import time
from collections import OrderedDict
from typing import Generic, Optional, Tuple, TypeVar


T = TypeVar('T')


class TTLCache(Generic[T]):
    """
    Bounded map whose entries expire after a fixed number of seconds.

    When full, the least recently read or written key is dropped first.
    Expired entries are removed lazily on read.
    """

    def __init__(self, max_size: int = 1000, default_ttl: int = 3600):
        self._entries: "OrderedDict[str, Tuple[float, T]]" = OrderedDict()
        self._max_size = max_size
        self._default_ttl = default_ttl

    def get(self, key: str) -> Optional[T]:
        """Return the live value for key, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if time.time() > expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: T, ttl: Optional[int] = None) -> None:
        """
        Store value under key for ttl seconds (default_ttl when omitted).

        Rewriting an existing key never evicts another one.
        """
        if key not in self._entries:
            while len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)

        self._entries[key] = (time.time() + (ttl or self._default_ttl), value)
        self._entries.move_to_end(key)
