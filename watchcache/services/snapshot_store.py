"""
This module provides the in-memory store for the live weather snapshot.
"""

from typing import Callable

from watchcache.models.weather import WeatherSnapshot
from watchcache.utils.logger import setup_logger
from watchcache.utils.rwlock import ReadWriteLock

logger = setup_logger(__name__)

SnapshotMutator = Callable[[WeatherSnapshot], WeatherSnapshot]


class SnapshotStore:
    """
    Owns the single live WeatherSnapshot.

    Reads return the snapshot object itself; it is immutable, so callers can
    hold on to it after the read lock is released. Writes take a pure mutator
    that builds the replacement from the current snapshot. The mutator runs
    under the exclusive lock and must not perform I/O.
    """

    def __init__(self, initial: WeatherSnapshot | None = None):
        self._snapshot = initial if initial is not None else WeatherSnapshot.empty()
        self._lock = ReadWriteLock()

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    async def read_snapshot(self) -> WeatherSnapshot:
        async with self._lock.read():
            return self._snapshot

    async def write_snapshot(self, mutator: SnapshotMutator) -> WeatherSnapshot:
        async with self._lock.write():
            self._snapshot = mutator(self._snapshot)
            snapshot = self._snapshot

        logger.debug(
            "Snapshot committed",
            extra={
                "event": "snapshot_commit",
                "current_timestamp": snapshot.current.timestamp,
                "hourly_entries": len(snapshot.hourly),
                "daily_entries": len(snapshot.daily),
            },
        )
        return snapshot
