"""Redis-backed sync lock for multi-process deployments.

Acquire is ``SET key token NX PX ttl``; the random owner token makes release
safe: a compare-and-delete Lua script removes the key only if this instance
still owns it, so a lock that expired and was re-taken elsewhere is never
released by the old holder.
"""

import secrets

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.core.constants import SYNC_LOCK_KEY_PREFIX

logger = structlog.get_logger(__name__)

RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class RedisSyncLock:
    """Non-blocking distributed lock keyed per account.

    The TTL bounds how long a crashed worker can block an account.

    Note: Does NOT inherit from SyncLockProtocol (uses structural typing).
    """

    def __init__(self, redis_client: Redis, *, ttl_seconds: int) -> None:
        """Initialize the lock.

        Args:
            redis_client: Async Redis client instance.
            ttl_seconds: Lock expiry, longer than any sync should take.
        """
        self._redis = redis_client
        self._ttl_ms = ttl_seconds * 1000
        self._tokens: dict[str, str] = {}

    @staticmethod
    def _redis_key(key: str) -> str:
        return f"{SYNC_LOCK_KEY_PREFIX}:{key}"

    async def acquire(self, key: str) -> bool:
        """Try to take the lock.

        Redis failures read as "not acquired": the caller reports a conflict
        rather than syncing without mutual exclusion.
        """
        token = secrets.token_hex(16)
        try:
            acquired = await self._redis.set(
                self._redis_key(key),
                token,
                nx=True,
                px=self._ttl_ms,
            )
        except RedisError as e:
            logger.error("sync_lock_acquire_failed", lock_key=key, error=str(e))
            return False

        if not acquired:
            return False

        self._tokens[key] = token
        return True

    async def release(self, key: str) -> None:
        token = self._tokens.pop(key, None)
        if token is None:
            return

        try:
            await self._redis.eval(RELEASE_SCRIPT, 1, self._redis_key(key), token)
        except RedisError as e:
            # Key expires after the TTL anyway
            logger.warning("sync_lock_release_failed", lock_key=key, error=str(e))
