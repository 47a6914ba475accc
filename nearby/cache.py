from __future__ import annotations

"""
Time-bounded in-process result cache.

Entries expire after ``ttl_seconds`` and the store holds at most
``max_entries`` keys, evicting the oldest insertion first.  The API runs
sync endpoints in a thread pool, so every access goes through a lock.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .config import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    generated: str
    meta: Dict[str, Any] = field(default_factory=dict)


def _fmt(value: Any) -> str:
    return "fallback" if value is None else str(value)


def nearby_cache_key(
    lat: Optional[float],
    lng: Optional[float],
    radius_km: float,
    hits_per_page: int,
    max_per_group: int,
    policy: str,
    featured_first: bool,
    exclude_handle: Optional[str] = None,
) -> str:
    return ":".join(
        [
            "nearby",
            _fmt(lat),
            _fmt(lng),
            str(radius_km),
            str(hits_per_page),
            str(max_per_group),
            policy,
            "featured" if featured_first else "plain",
            exclude_handle or "",
        ]
    )


def collection_cache_key(city_name: str, lat: float, lng: float, radius_km: float, hits_per_page: int) -> str:
    return f"static-collection:{city_name}:{lat}:{lng}:{radius_km}:{hits_per_page}"


class ResultCache:
    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_entries: int = CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self.ttl_seconds:
                del self._store[key]
                return None
            return entry

    def set(self, key: str, data: Any, **meta: Any) -> CacheEntry:
        now = self._clock()
        entry = CacheEntry(
            data=data,
            timestamp=now,
            generated=datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
            meta=meta,
        )
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = entry
            while len(self._store) > self.max_entries:
                self._store.popitem(last=False)
        return entry

    def age_seconds(self, entry: CacheEntry) -> float:
        return max(0.0, self._clock() - entry.timestamp)

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._store.keys())

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
