"""Sync lock protocol.

Guarantees at most one in-flight sync per account. Acquisition never waits:
a caller that finds the lock held must report a conflict instead of
queueing behind the running sync.

Implementations:
    - InMemorySyncLock: asyncio locks, single process
    - RedisSyncLock: SET NX PX with owner token, multi-process
"""

from typing import Protocol


class SyncLockProtocol(Protocol):
    """Non-blocking per-key mutual exclusion."""

    async def acquire(self, key: str) -> bool:
        """Try to take the lock for key.

        Returns:
            True if the lock was taken, False if another holder has it.
        """
        ...

    async def release(self, key: str) -> None:
        """Release a lock previously taken by this instance.

        Releasing a lock that is not held is a no-op.
        """
        ...
