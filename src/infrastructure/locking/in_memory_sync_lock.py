"""In-process sync lock.

One asyncio.Lock per key. Suitable when a single process runs every sync;
use RedisSyncLock when several workers share the database.
"""

import asyncio


class InMemorySyncLock:
    """Non-blocking per-key lock for a single event loop.

    Note: Does NOT inherit from SyncLockProtocol (uses structural typing).
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    async def acquire(self, key: str) -> bool:
        lock = self._locks.setdefault(key, asyncio.Lock())
        if lock.locked():
            return False
        # Uncontended acquire completes without yielding to the loop
        await lock.acquire()
        return True

    async def release(self, key: str) -> None:
        lock = self._locks.get(key)
        if lock is not None and lock.locked():
            lock.release()

    def is_locked(self, key: str) -> bool:
        """Whether key is currently held."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
