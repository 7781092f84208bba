"""Container module - Centralized dependency injection (composition root).

Every factory is an ``@lru_cache()`` singleton; settings are read here and
injected, never from business logic.

    from src.core.container import get_sync_account_handler

    handler = get_sync_account_handler()
    result = await handler.handle(SyncAccount(account_id=account_id))

Organized by concern:
- infrastructure: logging, database, encryption, unit of work, sync lock
- providers: provider adapter factory
- handlers: credential manager and command/query handlers
"""

from src.core.container.handlers import (
    get_complete_provider_link_handler,
    get_credential_manager,
    get_delete_account_handler,
    get_list_account_activities_handler,
    get_start_provider_link_handler,
    get_sync_account_handler,
    get_sync_all_accounts_handler,
)
from src.core.container.infrastructure import (
    get_database,
    get_encryption_service,
    get_logger,
    get_sync_lock,
    get_unit_of_work,
)
from src.core.container.providers import get_provider_factory

__all__ = [
    # Infrastructure
    "get_database",
    "get_encryption_service",
    "get_logger",
    "get_sync_lock",
    "get_unit_of_work",
    # Providers
    "get_provider_factory",
    # Handlers
    "get_complete_provider_link_handler",
    "get_credential_manager",
    "get_delete_account_handler",
    "get_list_account_activities_handler",
    "get_start_provider_link_handler",
    "get_sync_account_handler",
    "get_sync_all_accounts_handler",
]
