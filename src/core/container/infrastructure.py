"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console adapter)
- Database (SQLAlchemy async engine)
- Encryption (AES-256-GCM)
- Unit of work (portfolio repository per transaction)
- Sync lock (in-process, or Redis when redis_url is configured)

Adapters are imported inside the factories so importing the container never
pulls in optional infrastructure (redis) that the deployment does not use.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings
from src.core.enums import Environment

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork
    from src.domain.protocols.sync_lock_protocol import SyncLockProtocol
    from src.infrastructure.persistence.database import Database
    from src.infrastructure.providers.encryption_service import EncryptionService


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Get logger singleton (app-scoped).

    JSON output everywhere except development, where logs render as
    colored console lines.
    """
    from src.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(
        use_json=settings.environment != Environment.DEVELOPMENT,
        level=settings.log_level,
    )


@lru_cache()
def get_database() -> "Database":
    """Get database manager singleton (app-scoped)."""
    from src.infrastructure.persistence.database import Database

    settings = get_settings()
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_encryption_service() -> "EncryptionService":
    """Get encryption service singleton (app-scoped).

    Raises:
        RuntimeError: If encryption key is invalid.
    """
    from src.core.result import Failure, Success
    from src.infrastructure.providers.encryption_service import EncryptionService

    result = EncryptionService.create(get_settings().encryption_key)

    match result:
        case Success(value=service):
            return service
        case Failure(error=err):
            raise RuntimeError(f"Failed to initialize encryption service: {err.message}")


@lru_cache()
def get_unit_of_work() -> "PortfolioUnitOfWork":
    """Get portfolio unit of work singleton (app-scoped)."""
    from src.infrastructure.persistence.unit_of_work import SqlAlchemyPortfolioUnitOfWork

    return SqlAlchemyPortfolioUnitOfWork(
        database=get_database(),
        encryption=get_encryption_service(),
    )


@lru_cache()
def get_sync_lock() -> "SyncLockProtocol":
    """Get sync lock singleton (app-scoped).

    Returns RedisSyncLock when redis_url is configured (several workers),
    InMemorySyncLock otherwise (single process).
    """
    settings = get_settings()

    if settings.redis_url:
        from redis.asyncio import Redis

        from src.infrastructure.locking.redis_sync_lock import RedisSyncLock

        redis_client = Redis.from_url(
            settings.redis_url,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return RedisSyncLock(redis_client, ttl_seconds=settings.sync_lock_ttl_seconds)

    from src.infrastructure.locking.in_memory_sync_lock import InMemorySyncLock

    return InMemorySyncLock()
