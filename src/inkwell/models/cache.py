from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CacheEntry:
    """A single value held by the bounded cache."""

    key: str
    value: str
    size: int  # UTF-8 byte length of value
    stored_at: float  # Clock reading at insert
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at
