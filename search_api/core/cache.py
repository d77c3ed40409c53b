"""In-process result cache with a fixed time-to-live."""
from __future__ import annotations

import time
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar


V = TypeVar("V")


class TTLCache(Generic[V]):
    """Map keys to values that expire ``ttl_s`` seconds after they are stored.

    Expired entries are dropped lazily on read. ``purge_expired`` can be
    called to sweep them proactively.
    """

    def __init__(
        self,
        ttl_s: float = 300.0,
        *,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_s <= 0:
            raise ValueError("ttl_s must be positive")
        self.ttl_s = ttl_s
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[float, V]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Optional[V]:
        """Return the stored value, or ``None`` if absent or expired."""

        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: V) -> None:
        """Store ``value`` until now + ttl; overwrites any previous entry."""

        if self.max_entries is not None and key not in self._entries:
            if len(self._entries) >= self.max_entries:
                self.purge_expired()
            if len(self._entries) >= self.max_entries:
                # set() re-inserts keys, so dict order is write order
                oldest = next(iter(self._entries))
                self._entries.pop(oldest, None)
        self._entries.pop(key, None)
        self._entries[key] = (self._clock() + self.ttl_s, value)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Remove every expired entry and return how many were dropped."""

        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)
