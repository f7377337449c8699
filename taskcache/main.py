import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskcache.cache.layer import CacheLayer
from taskcache.core.config import Settings, SettingsDep, get_settings
from taskcache.core.exceptions import InvalidTaskId, TaskSerializationError
from taskcache.routers import tasks
from taskcache.services.task_service import TaskService
from taskcache.store import TaskStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    settings: Settings | None = None,
    store: TaskStore | None = None,
    cache: CacheLayer | None = None,
) -> FastAPI:
    """Wire store, cache and service together and build the ASGI app.

    The store lives as long as the returned app; nothing is kept in
    module globals.
    """
    settings = settings or get_settings()
    store = store if store is not None else TaskStore()
    cache = cache if cache is not None else CacheLayer(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await cache.init_cache()
        yield
        await cache.close()

    app = FastAPI(
        title="Task Cache API",
        description="In-memory task API with a Redis read-through cache",
        swagger_ui_parameters={"displayRequestDuration": True},
        version=VERSION,
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.store = store
    app.state.cache = cache
    app.state.task_service = TaskService(store, cache, settings)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(InvalidTaskId)
    async def invalid_task_id_handler(request: Request, exc: InvalidTaskId):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.exception_handler(TaskSerializationError)
    async def serialization_error_handler(
        request: Request, exc: TaskSerializationError
    ):
        logger.error(f"Response encoding failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Failed to encode response"},
        )

    # Include routers
    app.include_router(tasks.router)

    @app.get("/")
    async def root(settings: SettingsDep):
        return {
            "message": "Welcome to Task Cache API",
            "docs": "/docs",
            "version": VERSION,
            "cache_backend": settings.cache_backend,
        }

    @app.get("/health")
    async def health_check():
        if not cache.enabled:
            cache_status = "disabled"
        else:
            cache_status = "ok" if await cache.ping() else "unavailable"
        return {
            "status": "healthy",
            "cache": cache_status,
            "tasks": len(store),
        }

    @app.get("/cache/stats")
    async def cache_stats():
        return cache.get_stats()

    return app


def run():
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
