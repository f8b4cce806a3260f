"""FastAPI application factory and process entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from task_api.config import Settings, get_settings
from task_api.database import create_db_engine
from task_api.errors import register_error_handlers
from task_api.middleware import CORSHeadersMiddleware, RequestLoggingMiddleware
from task_api.routers import health, tasks
from task_api.store import TaskStore
from task_api.telemetry import instrument_fastapi, setup_telemetry


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    yield
    app.state.store.engine.dispose()
    logger.info("Database connections closed")


def create_app(settings: Settings | None = None, store: TaskStore | None = None) -> FastAPI:
    """Build the application around one shared task store.

    Args:
        settings: Configuration to use. Defaults to the environment.
        store: Storage client to serve from. Defaults to a store over a new
            engine built from ``settings``.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()
    if store is None:
        store = TaskStore(create_db_engine(settings))

    setup_telemetry(settings, store.engine)

    app = FastAPI(title="Task API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    # Last added runs first: logging wraps CORS.
    app.add_middleware(CORSHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(tasks.router)

    if settings.otel_enabled:
        instrument_fastapi(app)

    return app


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Server is running on port %d", settings.port)
    uvicorn.run(
        "task_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        access_log=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
