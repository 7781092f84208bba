"""Sync lock implementations (SyncLockProtocol adapters)."""

from src.infrastructure.locking.in_memory_sync_lock import InMemorySyncLock
from src.infrastructure.locking.redis_sync_lock import RedisSyncLock

__all__ = [
    "InMemorySyncLock",
    "RedisSyncLock",
]
