"""
This module defines the HTTP routes served to the watch.
"""

from datetime import datetime, UTC
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from watchcache.background.refresh_scheduler import RefreshScheduler
from watchcache.codec.watch_format import encode
from watchcache.config import get_settings
from watchcache.models.responses import HealthResponse, RefreshStatus, SnapshotStatus
from watchcache.services.snapshot_store import SnapshotStore
from watchcache.utils.dependencies import get_refresh_scheduler, get_snapshot_store
from watchcache.utils.logger import setup_logger

logger = setup_logger(__name__)
settings = get_settings()

WATCH_MEDIA_TYPE = "application/octet-stream"

router = APIRouter()


@router.get(
    "/wu",
    response_class=Response,
    responses={200: {"content": {WATCH_MEDIA_TYPE: {}}}},
)
async def watch_update(store: SnapshotStore = Depends(get_snapshot_store)) -> Response:
    """
    Current weather for the watch as a packed binary payload.

    Always answers 200 with whatever snapshot is cached, including the
    zeroed one served before the first refresh succeeds.
    """
    now = int(datetime.now(UTC).timestamp())
    snapshot = await store.read_snapshot()
    payload = encode(snapshot, now)

    logger.debug(
        "Served watch update",
        extra={"event": "watch_update", "bytes": len(payload), "now": now},
    )
    return Response(content=payload, media_type=WATCH_MEDIA_TYPE)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: SnapshotStore = Depends(get_snapshot_store),
    scheduler: Optional[RefreshScheduler] = Depends(get_refresh_scheduler),
):
    """
    Health check endpoint that returns snapshot freshness and refresh status.
    """
    snapshot = await store.read_snapshot()

    if scheduler is not None:
        refresh = scheduler.status()
    else:
        refresh = RefreshStatus(running=False, total_ticks=0, failed_ticks=0)

    return HealthResponse(
        status="healthy" if snapshot.refreshed_at is not None else "starting",
        version=settings.app_version,
        timestamp=datetime.now(UTC).isoformat(),
        snapshot=SnapshotStatus(
            refreshed_at=snapshot.refreshed_at.isoformat() if snapshot.refreshed_at else None,
            current_timestamp=snapshot.current.timestamp,
            hourly_entries=len(snapshot.hourly),
            daily_entries=len(snapshot.daily),
        ),
        refresh=refresh,
    )
