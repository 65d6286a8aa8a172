"""In-memory content cache bounded by age, entry count, and total bytes.

Raw Markdown and rendered HTML share one cache under distinct keys, so the
two can expire and be evicted independently.

No operation raises. A miss is always a valid answer: callers recompute and
store again. A value that alone exceeds the byte budget is refused and
logged rather than stored, so the budgets hold after every call.

All methods are synchronous. Under asyncio that makes each call atomic with
respect to other tasks, so concurrent callers need no external locking.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import TYPE_CHECKING

import structlog

from inkwell.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from inkwell.config import CacheSettings

log = structlog.get_logger()


def value_size(value: str) -> int:
    return len(value.encode("utf-8"))


class BoundedCache:
    """LRU cache with per-entry expiry, a max item count, and a max byte size."""

    def __init__(
        self,
        *,
        max_items: int = 5000,
        max_bytes: int = 50 * 1024 * 1024,
        default_ttl: float = 86400,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_items = max_items
        self.max_bytes = max_bytes
        self.default_ttl = default_ttl
        self._clock = clock
        # Oldest access first; move_to_end() marks an entry most recently used.
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._bytes = 0

    @classmethod
    def from_settings(cls, settings: CacheSettings) -> BoundedCache:
        return cls(
            max_items=settings.max_items,
            max_bytes=settings.max_bytes,
            default_ttl=settings.ttl_seconds,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has(self, key: str) -> bool:
        """True iff an unexpired entry exists for ``key``. Does not touch recency."""
        entry = self._live_entry(key)
        return entry is not None

    def get(self, key: str) -> str | None:
        """Return the cached value and mark it most recently used, or ``None``."""
        entry = self._live_entry(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.value

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            self._remove(key)
            return None
        return entry

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set(self, key: str, value: str, ttl: float | None = None) -> None:
        """Insert or replace ``key``, evicting as needed to stay within budget."""
        size = value_size(value)
        if key in self._entries:
            self._remove(key)

        if size > self.max_bytes:
            log.warning(
                "cache_value_too_large",
                key=key,
                size=size,
                max_bytes=self.max_bytes,
            )
            return

        now = self._clock()
        self._make_room(size, now)
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            size=size,
            stored_at=now,
            expires_at=now + (self.default_ttl if ttl is None else ttl),
        )
        self._bytes += size

    def delete(self, key: str) -> bool:
        if key not in self._entries:
            return False
        self._remove(key)
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._bytes = 0

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._bytes -= entry.size

    def _fits(self, size: int) -> bool:
        return len(self._entries) < self.max_items and self._bytes + size <= self.max_bytes

    def _make_room(self, size: int, now: float) -> None:
        if self._fits(size):
            return

        expired = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            self._remove(key)

        evicted = 0
        while not self._fits(size):
            key, entry = self._entries.popitem(last=False)
            self._bytes -= entry.size
            evicted += 1

        if expired or evicted:
            log.debug("cache_evicted", expired=len(expired), lru=evicted)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def size_bytes(self) -> int:
        return self._bytes

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.has(key)
