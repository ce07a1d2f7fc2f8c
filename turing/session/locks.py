"""
Keyed Locks - Per-identifier mutual exclusion for async handlers.

Requests against different keys never wait on each other. A key's lock
is created on first use and dropped once no task holds or awaits it, so
the table does not grow with every round ever played.

Locks are taken with `async with`, which releases them on every exit
path, including cancellation.
"""

from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable
import asyncio


class KeyedLocks:
    """
    One asyncio.Lock per key.

    Usage:
        locks = KeyedLocks()

        async with locks.hold(("session-1", "mayor")):
            ...read, modify, write...
    """

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for key for the duration of the block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        """Whether some task currently holds the lock for key."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
