import logging
from typing import Any

from redis.asyncio import Redis, RedisError

from taskcache.cache.memory import MemoryBackend
from taskcache.core.config import Settings, get_settings


class CacheLayer:
    """
    Best-effort key/value cache in front of the task store.

    The cache is never the source of truth: every backend failure (connection
    refused, timeout, server error) is logged, counted in ``stats["errors"]``
    and reported to the caller as a miss or a failed write. Nothing raised by
    the backend escapes this class.

    Values are opaque strings; the layer does not parse them.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: Any = None,
        logger: logging.Logger | None = None,
    ):
        self._settings = settings
        self._client = client
        self.logger = logger or logging.getLogger(__name__)
        self._initialized = False

        # Stats tracking
        self.stats = {
            "hits": 0,
            "misses": 0,
            "errors": 0,
            "sets": 0,
            "deletes": 0,
        }

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def enabled(self) -> bool:
        return self._client is not None or self.settings.cache_backend != "none"

    def _build_client(self):
        settings = self.settings
        if settings.cache_backend == "memory":
            return MemoryBackend(maxsize=settings.memory_cache_maxsize)
        return Redis.from_url(
            settings.redis_dsn,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.redis_pool_size,
            socket_connect_timeout=settings.cache_connect_timeout_seconds,
            socket_timeout=settings.cache_timeout_seconds,
            socket_keepalive=True,
            health_check_interval=30,
        )

    async def init_cache(self):
        """Build the backend client and check that it answers.

        An unreachable backend is logged but not fatal: the client is kept
        so the cache starts working once the backend comes back.
        """
        if self._initialized:
            return
        self._initialized = True

        if not self.enabled:
            self.logger.info("Cache disabled")
            return

        if self._client is None:
            self._client = self._build_client()

        try:
            await self._client.ping()
            self.logger.info(f"Cache layer initialized ({self.backend_name})")
        except RedisError as e:
            self.stats["errors"] += 1
            self.logger.error(f"Cache backend unreachable, running uncached: {e}")

    @property
    def backend_name(self) -> str:
        if self._client is None:
            return "none"
        if isinstance(self._client, MemoryBackend):
            return "memory"
        return "redis"

    def _key(self, key: str) -> str:
        """Build namespaced cache key."""
        return f"{self.settings.cache_namespace}{key}"

    async def get(self, key: str) -> str | None:
        """
        Look up a key.

        Returns:
            The cached payload, or None on a miss or a backend error.
        """
        await self.init_cache()
        if self._client is None:
            self.stats["misses"] += 1
            return None

        try:
            raw = await self._client.get(self._key(key))
        except RedisError as e:
            self.stats["errors"] += 1
            self.logger.warning(f"Cache GET error for {key}: {e}")
            return None

        if raw is None:
            self.stats["misses"] += 1
            self.logger.debug(f"Cache miss: {key}")
            return None

        self.stats["hits"] += 1
        self.logger.debug(f"Cache hit: {key}")
        return raw

    async def set(self, key: str, value: str, ttl: int) -> bool:
        """
        Store a payload that expires after ttl seconds.

        Returns:
            False if the backend rejected the write, True otherwise.
        """
        await self.init_cache()
        if self._client is None:
            return True

        try:
            await self._client.set(self._key(key), value, ex=ttl)
        except RedisError as e:
            self.stats["errors"] += 1
            self.logger.warning(f"Cache SET error for {key}: {e}")
            return False

        self.stats["sets"] += 1
        self.logger.debug(f"Cached {key} for {ttl}s")
        return True

    async def delete(self, key: str) -> bool:
        """
        Drop a key. Deleting a key that is not cached is a success.

        Returns:
            False if the backend could not be reached, True otherwise.
        """
        await self.init_cache()
        if self._client is None:
            return True

        try:
            await self._client.delete(self._key(key))
        except RedisError as e:
            self.stats["errors"] += 1
            self.logger.warning(f"Cache DELETE error for {key}: {e}")
            return False

        self.stats["deletes"] += 1
        self.logger.debug(f"Invalidated {key}")
        return True

    async def ping(self) -> bool:
        await self.init_cache()
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            self.stats["errors"] += 1
            self.logger.warning(f"Cache ping failed: {e}")
            return False

    async def close(self):
        """Graceful shutdown of cache connections."""
        if self._client is None:
            return
        try:
            await self._client.aclose()
            self.logger.info("Cache connection closed")
        except RedisError as e:
            self.logger.error(f"Error closing cache: {e}")

    def get_stats(self) -> dict:
        lookups = self.stats["hits"] + self.stats["misses"]
        return {
            **self.stats,
            "backend": self.backend_name,
            "hit_rate": self.stats["hits"] / lookups if lookups > 0 else 0,
        }
