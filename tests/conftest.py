# tests/conftest.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from taskcache.cache.layer import CacheLayer
from taskcache.core.config import Settings
from taskcache.main import create_app
from taskcache.services.task_service import TaskService
from taskcache.store import TaskStore


class FakeRedis:
    """
    In-memory stand-in for redis.asyncio.Redis.

    Records every call and the TTL each key was written with, so tests can
    assert on cache traffic without a Redis server.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        self.calls.append(("get", key))
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.calls.append(("set", key))
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self.calls.append(("delete", key))
            self.ttls.pop(key, None)
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self) -> None:
        self.closed = True


class BrokenRedis:
    """Redis double whose every command fails like an unreachable server."""

    def __init__(self) -> None:
        self.attempts = 0

    def _fail(self):
        self.attempts += 1
        raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def ping(self):
        self._fail()

    async def get(self, key):
        self._fail()

    async def set(self, key, value, ex=None):
        self._fail()

    async def delete(self, *keys):
        self._fail()

    async def aclose(self) -> None:
        pass


@pytest.fixture()
def settings() -> Settings:
    return Settings(cache_backend="redis", redis_dsn="redis://cache.invalid:6379/0")


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def broken_redis() -> BrokenRedis:
    return BrokenRedis()


@pytest.fixture()
def cache(settings: Settings, fake_redis: FakeRedis) -> CacheLayer:
    return CacheLayer(settings, client=fake_redis)


@pytest.fixture()
def service(store: TaskStore, cache: CacheLayer, settings: Settings) -> TaskService:
    return TaskService(store, cache, settings)


@pytest.fixture()
def client(settings: Settings, store: TaskStore, cache: CacheLayer):
    app = create_app(settings, store=store, cache=cache)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def broken_client(settings: Settings, broken_redis: BrokenRedis):
    app = create_app(settings, cache=CacheLayer(settings, client=broken_redis))
    with TestClient(app) as c:
        yield c
