"""
This module runs the periodic refresh of the cached weather snapshot.
"""

import asyncio
import logging
from datetime import datetime, UTC
from enum import Enum
from typing import Optional

from watchcache.config import get_settings
from watchcache.exceptions import FetchError
from watchcache.models.responses import RefreshStatus
from watchcache.services.provider_client import ProviderClient
from watchcache.services.snapshot_store import SnapshotStore
from watchcache.utils.logger import setup_logger

logger = setup_logger(__name__)
settings = get_settings()


class RefreshKind(str, Enum):
    CURRENT = "current"
    FULL = "full"


class RefreshScheduler:
    """
    Alternates cheap current-conditions refreshes with full refreshes.

    Each tick bumps a counter; when it reaches full_refresh_every the tick
    performs a full fetch and the counter restarts at zero, otherwise only
    current conditions are fetched. The counter starts past the threshold so
    the first tick populates hourly and daily data right away.

    Upstream calls happen before the store's write lock is taken. A failed
    fetch leaves the snapshot untouched and the next tick proceeds as usual.
    """

    def __init__(
        self,
        store: SnapshotStore,
        client: ProviderClient,
        interval: Optional[float] = None,
        full_refresh_every: Optional[int] = None,
    ):
        self.store = store
        self.client = client
        self.interval = settings.refresh_interval if interval is None else interval
        self.full_refresh_every = (
            settings.full_refresh_every
            if full_refresh_every is None
            else full_refresh_every
        )
        self.ticks_since_full = self.full_refresh_every
        self.total_ticks = 0
        self.failed_ticks = 0
        self.last_kind: Optional[RefreshKind] = None
        self.last_error: Optional[str] = None
        self.running = False

    async def tick(self) -> RefreshKind:
        """
        Run one refresh step.

        Returns:
            The kind of refresh attempted, whether or not it succeeded
        """
        self.ticks_since_full += 1
        self.total_ticks += 1

        if self.ticks_since_full >= self.full_refresh_every:
            self.ticks_since_full = 0
            kind = RefreshKind.FULL
        else:
            kind = RefreshKind.CURRENT
        self.last_kind = kind

        try:
            if kind is RefreshKind.FULL:
                await self._refresh_full()
            else:
                await self._refresh_current()
            self.last_error = None
        except FetchError as e:
            self.failed_ticks += 1
            self.last_error = str(e)
            logger.error(
                "Weather refresh failed, keeping previous snapshot",
                extra={
                    "event": "refresh_failed",
                    "kind": kind.value,
                    "endpoint": e.endpoint,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )

        if logger.isEnabledFor(logging.DEBUG):
            snapshot = await self.store.read_snapshot()
            logger.debug(
                "Current snapshot",
                extra={"event": "snapshot_state", "snapshot": snapshot.model_dump(mode="json")},
            )
        return kind

    async def _refresh_full(self):
        result = await self.client.fetch_full()
        refreshed_at = datetime.now(UTC)
        await self.store.write_snapshot(
            lambda snapshot: snapshot.with_full(
                result.current, result.hourly, result.daily, refreshed_at
            )
        )
        logger.info(
            "Full weather refresh committed",
            extra={
                "event": "refresh_full",
                "hourly_entries": len(result.hourly),
                "daily_entries": len(result.daily),
            },
        )

    async def _refresh_current(self):
        current = await self.client.fetch_current()
        refreshed_at = datetime.now(UTC)
        await self.store.write_snapshot(
            lambda snapshot: snapshot.with_current(current, refreshed_at)
        )
        logger.info(
            "Current conditions refresh committed",
            extra={"event": "refresh_current", "timestamp": current.timestamp},
        )

    async def run(self, stop_event: asyncio.Event):
        """
        Tick until stop_event is set.

        The wait between ticks ends early when stop_event is set, so shutdown
        does not have to sit out the refresh interval.

        Args:
            stop_event: Event signalling the loop to exit
        """
        if self.running:
            raise RuntimeError("refresh loop is already running")
        self.running = True
        logger.info(
            "Refresh scheduler started",
            extra={
                "event": "scheduler_start",
                "interval_seconds": self.interval,
                "full_refresh_every": self.full_refresh_every,
            },
        )
        try:
            while not stop_event.is_set():
                try:
                    await self.tick()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(
                        "Refresh tick error",
                        extra={
                            "event": "refresh_tick_error",
                            "error": str(e),
                            "error_type": type(e).__name__,
                        },
                    )

                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        except asyncio.CancelledError:
            logger.info("Refresh scheduler cancelled")
            raise
        finally:
            self.running = False

        logger.info("Refresh scheduler stopped", extra={"event": "scheduler_stop"})

    def status(self) -> RefreshStatus:
        return RefreshStatus(
            running=self.running,
            total_ticks=self.total_ticks,
            failed_ticks=self.failed_ticks,
            last_kind=self.last_kind.value if self.last_kind else None,
            last_error=self.last_error,
        )


async def start_refresh_scheduler(
    scheduler: RefreshScheduler, stop_event: asyncio.Event
) -> Optional[asyncio.Task]:
    """
    Starts the refresh loop as a background task.

    Args:
        scheduler: Scheduler to run
        stop_event: Event used to stop the loop on shutdown

    Returns:
        asyncio.Task or None: The created task if refreshing is enabled,
                              None if disabled
    """
    if not settings.enable_refresh:
        logger.info("Weather refresh is disabled")
        return None

    return asyncio.create_task(scheduler.run(stop_event), name="weather-refresh")


async def stop_refresh_scheduler(
    task: Optional[asyncio.Task], stop_event: asyncio.Event, timeout: float = 5.0
):
    """
    Signals the refresh loop and waits for it to finish.

    A tick blocked on a slow upstream call is cancelled once timeout expires.
    """
    stop_event.set()
    if task is None:
        return

    try:
        await asyncio.wait_for(task, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Refresh scheduler did not stop in time, cancelled")
