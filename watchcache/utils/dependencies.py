"""
FastAPI dependency injection providers.

Services are created once in the application lifespan and kept on
app.state; these providers hand them to the route handlers, and tests
replace them through app.dependency_overrides.
"""

from typing import Optional

from fastapi import Request

from watchcache.background.refresh_scheduler import RefreshScheduler
from watchcache.services.snapshot_store import SnapshotStore


def get_snapshot_store(request: Request) -> SnapshotStore:
    """
    Provide the live snapshot store.

    Returns:
        SnapshotStore: Store created at startup
    """
    return request.app.state.snapshot_store


def get_refresh_scheduler(request: Request) -> Optional[RefreshScheduler]:
    """
    Provide the refresh scheduler, if one was started.

    Returns:
        RefreshScheduler or None when refreshing is not configured
    """
    return getattr(request.app.state, "refresh_scheduler", None)
