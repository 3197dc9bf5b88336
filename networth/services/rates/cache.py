"""
In-memory Rate Cache

Fetched rates are reused for a short freshness window (5 minutes by
default) to avoid asking the network for the same rate again.

DESIGN DECISION: The cache is an explicit object injected into the chain
and the converter, not module state. Tests get a fresh one each time.

- Keys are the exact (from, to, date) triple; no fuzzy date matching
- Staleness is evaluated on read; stale entries are not swept
- Size is bounded: least recently used entries are evicted first
- Nothing is persisted; a new process starts empty
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Union

from networth.models.currency import as_date, is_valid_rate, normalize_code


CacheKey = tuple[str, str, date]


@dataclass(frozen=True)
class CachedRate:
    """A fetched rate and when it was fetched (epoch seconds)."""
    rate: float
    timestamp: float


class RateCache:
    """Time-bounded, size-bounded cache of exchange rates."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CachedRate]" = OrderedDict()

    @staticmethod
    def _key(source: str, target: str, on_date: Union[date, str]) -> CacheKey:
        return (normalize_code(source), normalize_code(target), as_date(on_date))

    def get(self, source: str, target: str, on_date: Union[date, str]) -> Optional[float]:
        """Return the rate if present and still fresh, else None."""
        key = self._key(source, target, on_date)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self._ttl:
            return None
        self._entries.move_to_end(key)
        return entry.rate

    def peek(self, source: str, target: str, on_date: Union[date, str]) -> Optional[float]:
        """Return the rate if present at all, however old."""
        entry = self._entries.get(self._key(source, target, on_date))
        return entry.rate if entry is not None else None

    def put(self, source: str, target: str, on_date: Union[date, str], rate: float) -> None:
        """Store a rate. Identity pairs and unusable rates are ignored."""
        key = self._key(source, target, on_date)
        if key[0] == key[1] or not is_valid_rate(rate):
            return
        self._entries[key] = CachedRate(rate=float(rate), timestamp=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict:
        """Size and keys ("FROM-TO-YYYY-MM-DD"), for debugging."""
        return {
            "size": len(self._entries),
            "keys": [f"{s}-{t}-{d.isoformat()}" for s, t, d in self._entries],
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        source, target, on_date = key
        return self._key(source, target, on_date) in self._entries
