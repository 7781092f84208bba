"""Unit tests for sync lock adapters (in-memory and Redis)."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.infrastructure.locking import InMemorySyncLock, RedisSyncLock
from src.infrastructure.locking.redis_sync_lock import RELEASE_SCRIPT


class TestInMemorySyncLock:
    async def test_second_acquire_rejected_without_waiting(self):
        lock = InMemorySyncLock()

        assert await lock.acquire("account-1") is True
        assert await lock.acquire("account-1") is False
        assert lock.is_locked("account-1")

    async def test_keys_are_independent(self):
        lock = InMemorySyncLock()

        assert await lock.acquire("account-1") is True
        assert await lock.acquire("account-2") is True

    async def test_release_allows_reacquire(self):
        lock = InMemorySyncLock()
        await lock.acquire("account-1")

        await lock.release("account-1")

        assert not lock.is_locked("account-1")
        assert await lock.acquire("account-1") is True

    async def test_release_of_unheld_key_is_noop(self):
        lock = InMemorySyncLock()

        await lock.release("never-taken")

        assert not lock.is_locked("never-taken")


@pytest.fixture
def redis_client() -> AsyncMock:
    client = AsyncMock()
    client.set = AsyncMock(return_value=True)
    client.eval = AsyncMock(return_value=1)
    return client


class TestRedisSyncLock:
    async def test_acquire_sets_key_nx_with_ttl(self, redis_client):
        lock = RedisSyncLock(redis_client, ttl_seconds=300)

        assert await lock.acquire("account-1") is True

        args, kwargs = redis_client.set.call_args
        assert args[0] == "sync_lock:account-1"
        assert kwargs == {"nx": True, "px": 300_000}

    async def test_acquire_rejected_when_key_exists(self, redis_client):
        redis_client.set.return_value = None
        lock = RedisSyncLock(redis_client, ttl_seconds=300)

        assert await lock.acquire("account-1") is False

    async def test_redis_failure_reads_as_not_acquired(self, redis_client):
        redis_client.set.side_effect = RedisConnectionError("down")
        lock = RedisSyncLock(redis_client, ttl_seconds=300)

        assert await lock.acquire("account-1") is False

    async def test_release_compares_owner_token(self, redis_client):
        lock = RedisSyncLock(redis_client, ttl_seconds=300)
        await lock.acquire("account-1")
        token = redis_client.set.call_args.args[1]

        await lock.release("account-1")

        redis_client.eval.assert_awaited_once_with(
            RELEASE_SCRIPT, 1, "sync_lock:account-1", token
        )

    async def test_release_without_acquire_skips_redis(self, redis_client):
        lock = RedisSyncLock(redis_client, ttl_seconds=300)

        await lock.release("account-1")

        redis_client.eval.assert_not_awaited()

    async def test_release_failure_is_swallowed(self, redis_client):
        redis_client.eval.side_effect = RedisConnectionError("down")
        lock = RedisSyncLock(redis_client, ttl_seconds=300)
        await lock.acquire("account-1")

        await lock.release("account-1")
