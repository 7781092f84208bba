"""SQLAlchemy unit of work for the portfolio repository.

Each ``begin()`` opens one database transaction and yields a repository bound
to it: commit on normal exit, rollback when the block raises.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.domain.protocols.encryption_protocol import EncryptionProtocol
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories.portfolio_repository import (
    SqlAlchemyPortfolioRepository,
)


class SqlAlchemyPortfolioUnitOfWork:
    """PortfolioUnitOfWork backed by Database.transaction().

    Example:
        >>> async with unit_of_work.begin() as repo:
        ...     await repo.create_activity(activity)
    """

    def __init__(self, database: Database, encryption: EncryptionProtocol) -> None:
        self._database = database
        self._encryption = encryption

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[SqlAlchemyPortfolioRepository]:
        async with self._database.transaction() as session:
            yield SqlAlchemyPortfolioRepository(session, self._encryption)
