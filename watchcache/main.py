import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from watchcache.api import routes
from watchcache.background.refresh_scheduler import (
    RefreshScheduler,
    start_refresh_scheduler,
    stop_refresh_scheduler,
)
from watchcache.config import get_settings
from watchcache.exceptions import ConfigurationError
from watchcache.middleware.request_tracker import RequestTrackerMiddleware
from watchcache.services.provider_client import ProviderClient
from watchcache.services.snapshot_store import SnapshotStore
from watchcache.utils.logger import setup_logger

logger = setup_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Watch Weather Cache...")

    if not settings.openweatherapi_key:
        logger.error("OPENWEATHERAPI_KEY is not set")
        raise ConfigurationError("OPENWEATHERAPI_KEY environment variable is required")

    store = SnapshotStore()
    provider_client = ProviderClient(api_key=settings.openweatherapi_key)
    scheduler = RefreshScheduler(store, provider_client)
    stop_event = asyncio.Event()

    app.state.snapshot_store = store
    app.state.refresh_scheduler = scheduler
    app.state.refresh_task = await start_refresh_scheduler(scheduler, stop_event)

    try:
        yield
    finally:
        logger.info("Shutting down Watch Weather Cache...")
        await stop_refresh_scheduler(app.state.refresh_task, stop_event)
        await provider_client.close()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(RequestTrackerMiddleware)

Instrumentator().instrument(app).expose(app, endpoint="/prometheus-metrics")

app.include_router(routes.router)


def run():
    uvicorn.run(
        "watchcache.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
