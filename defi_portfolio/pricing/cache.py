"""In-memory TTL cache guarded by an asyncio lock."""
import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable


@dataclass
class CacheEntry:
    value: Any
    created_at: float


class TTLCache:
    """Key/value store whose entries expire ``ttl`` seconds after being written.

    Last writer wins; expired entries are dropped lazily on read.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: Hashable) -> Any | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at >= self.ttl:
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: Hashable, value: Any) -> None:
        async with self._lock:
            self._entries[key] = CacheEntry(value=value, created_at=self._clock())

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
