from functools import wraps
from typing import Any, Callable


def read_through(key_builder: Callable[..., str], ttl: Callable[[Any], int]):
    """
    Decorator for async service methods returning a serialized payload.

    The instance must expose a ``cache`` (CacheLayer). key_builder receives
    the method's args/kwargs without self; ttl receives the instance.
    A None result is treated as "not found" and is never cached.
    Example:
      @read_through(lambda task_id: f"task:{task_id}", ttl=lambda svc: 3600)
      async def _load_task(self, task_id): ...
    """

    def decorator(fn: Callable):
        @wraps(fn)
        async def wrapper(self, *args, **kwargs):
            key = key_builder(*args, **kwargs)

            cached = await self.cache.get(key)
            if cached is not None:
                return cached

            value = await fn(self, *args, **kwargs)
            if value is None:
                return None

            await self.cache.set(key, value, ttl=ttl(self))
            return value

        return wrapper

    return decorator


def invalidates(key_builder: Callable[..., str]):
    """
    Decorator that drops a cache key after the wrapped write succeeds.

    The key is only deleted when the method returns a truthy result, i.e.
    after the store has actually changed. Failed writes leave the cache alone.
    """

    def decorator(fn: Callable):
        @wraps(fn)
        async def wrapper(self, *args, **kwargs):
            result = await fn(self, *args, **kwargs)
            if result:
                await self.cache.delete(key_builder(*args, **kwargs))
            return result

        return wrapper

    return decorator
