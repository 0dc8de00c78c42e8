"""
NoteHub Backend: In-Memory Number Registry
===========================================

What:  A process-wide, append-only list of 32-bit integers shared by all
       requests, plus the read/write lock that guards it.
Why:   GET /numbers must not serialize behind other readers, while
       POST /numbers needs exclusive access for its append.
How:   `ReadWriteLock` grants shared access to any number of readers or
       exclusive access to one writer. Waiters are served in arrival order,
       so a reader that arrives after a waiting writer queues behind it and
       a steady stream of readers cannot starve writers.

Lifetime:
    Created empty by the app factory, lost on restart. With several uvicorn
    workers each process has its own registry.

Lock State Machine:
    FREE      ─ acquire_read ─▶  READING (n readers)
    FREE      ─ acquire_write ─▶ WRITING
    READING   ─ last release ─▶  FREE, then wake queue head
    WRITING   ─ release ─────▶   FREE, then wake queue head

    Waking grants the head writer alone, or every consecutive reader up to
    the next queued writer.
"""

import asyncio
import logging
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Deque, List, Tuple

from notehub.schemas.note import INT32_MAX, INT32_MIN

logger = logging.getLogger(__name__)

_READ = "read"
_WRITE = "write"


class ReadWriteLock:
    """
    Multi-reader / single-writer lock for asyncio tasks.

    Entry points:
        async with lock.read():   shared access
        async with lock.write():  exclusive access

    Releasing never awaits, so a task cancelled inside the critical section
    (e.g. a dropped client connection) always gives the lock back. A task
    cancelled while still queued is removed from the queue; if the lock was
    granted in the same instant it is released again.
    """

    def __init__(self) -> None:
        self._readers = 0
        self._writer = False
        self._waiters: Deque[Tuple[str, asyncio.Future]] = deque()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    @property
    def waiting(self) -> int:
        return sum(1 for _, fut in self._waiters if not fut.done())

    # ── Shared access ─────────────────────────────────────────────────────

    async def acquire_read(self) -> None:
        if not self._writer and not self._waiters:
            self._readers += 1
            return
        await self._wait(_READ)

    def release_read(self) -> None:
        if self._readers <= 0:
            raise RuntimeError("release_read() called without a matching acquire_read()")
        self._readers -= 1
        self._wake()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        await self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    # ── Exclusive access ──────────────────────────────────────────────────

    async def acquire_write(self) -> None:
        if not self._writer and self._readers == 0 and not self._waiters:
            self._writer = True
            return
        await self._wait(_WRITE)

    def release_write(self) -> None:
        if not self._writer:
            raise RuntimeError("release_write() called without a matching acquire_write()")
        self._writer = False
        self._wake()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        await self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    # ── Queue handling ────────────────────────────────────────────────────

    async def _wait(self, kind: str) -> None:
        fut = asyncio.get_running_loop().create_future()
        entry = (kind, fut)
        self._waiters.append(entry)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Granted just before the cancellation landed: hand it back
                if kind == _READ:
                    self.release_read()
                else:
                    self.release_write()
            else:
                try:
                    self._waiters.remove(entry)
                except ValueError:
                    pass
                # A cancelled writer at the head may have been blocking readers
                self._wake()
            raise

    def _wake(self) -> None:
        while self._waiters:
            kind, fut = self._waiters[0]
            if fut.done():
                self._waiters.popleft()
                continue
            if kind == _WRITE:
                if self._writer or self._readers:
                    return
                self._waiters.popleft()
                self._writer = True
                fut.set_result(None)
                return
            if self._writer:
                return
            self._waiters.popleft()
            self._readers += 1
            fut.set_result(None)


class NumberRegistry:
    """
    Shared ordered sequence of int32 values.

    Appends are totally ordered by write-lock acquisition; the sequence is
    never reordered, trimmed or persisted.
    """

    def __init__(self) -> None:
        self._numbers: List[int] = []
        self._lock = ReadWriteLock()

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    async def snapshot(self) -> List[int]:
        """Point-in-time copy of the whole sequence ([] when empty)."""
        async with self._lock.read():
            return list(self._numbers)

    async def append(self, value: int) -> List[int]:
        """
        Append `value` and return the sequence as it stood right after it.

        Raises:
            ValueError: value is not an int inside the signed 32-bit range
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected an integer, got {type(value).__name__}")
        if not INT32_MIN <= value <= INT32_MAX:
            raise ValueError(f"{value} is outside the 32-bit signed range")

        async with self._lock.write():
            self._numbers.append(value)
            result = list(self._numbers)

        logger.debug("Registry append %d (size=%d)", value, len(result))
        return result
