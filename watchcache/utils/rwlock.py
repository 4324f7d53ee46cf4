"""
Multiple-reader / single-writer lock for asyncio tasks.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ReadWriteLock:
    """
    Readers share the lock, a writer holds it exclusively.

    Writers take priority: once a writer is waiting, new readers queue
    behind it, so a steady flow of requests cannot starve the refresh task.
    """

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        """Number of readers currently holding the lock."""
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and not self._waiting_writers
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writer and not self._readers
                )
            finally:
                self._waiting_writers -= 1
                # Wake readers parked behind a writer that gave up waiting.
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()
