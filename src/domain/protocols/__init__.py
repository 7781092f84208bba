"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

IMPORTANT: Re-exports are ONLY for protocols defined in this package.

Usage:
    from src.domain.protocols import ProviderProtocol, PortfolioUnitOfWork
"""

from src.domain.protocols.encryption_protocol import (
    DecryptionError,
    EncryptionError,
    EncryptionKeyError,
    EncryptionProtocol,
    SerializationError,
)
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.portfolio_repository import (
    PortfolioRepository,
    PortfolioUnitOfWork,
)
from src.domain.protocols.provider_factory_protocol import ProviderFactoryProtocol
from src.domain.protocols.provider_protocol import (
    AuthorizationGrant,
    AuthorizationStart,
    NormalizedHolding,
    NormalizedPortfolio,
    ProviderAccountList,
    ProviderPositionList,
    ProviderProtocol,
)
from src.domain.protocols.sync_lock_protocol import SyncLockProtocol

__all__ = [
    # Service protocols
    "EncryptionProtocol",
    "LoggerProtocol",
    "ProviderFactoryProtocol",
    "ProviderProtocol",
    "SyncLockProtocol",
    # Repository protocols
    "PortfolioRepository",
    "PortfolioUnitOfWork",
    # Provider data types
    "AuthorizationGrant",
    "AuthorizationStart",
    "NormalizedHolding",
    "NormalizedPortfolio",
    "ProviderAccountList",
    "ProviderPositionList",
    # Encryption errors
    "DecryptionError",
    "EncryptionError",
    "EncryptionKeyError",
    "SerializationError",
]
