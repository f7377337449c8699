import time
from typing import Callable

from cachetools import TLRUCache


def _expires_at(key, value, now):
    # value is (payload, ttl_seconds)
    return now + value[1]


class MemoryBackend:
    """
    Process-local stand-in for Redis with the subset of the async client API
    that CacheLayer uses. Each entry carries its own TTL; least recently used
    entries are evicted once maxsize is reached.
    """

    def __init__(self, maxsize: int = 2048, timer: Callable[[], float] = time.monotonic):
        self._data = TLRUCache(maxsize=maxsize, ttu=_expires_at, timer=timer)

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        return entry[0] if entry is not None else None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._data[key] = (value, ex if ex is not None else float("inf"))
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._data.pop(key, None) is not None)

    async def aclose(self):
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
