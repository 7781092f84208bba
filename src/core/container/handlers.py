"""Handler factories.

Application services and command/query handlers wired with the
infrastructure singletons. Handlers are stateless apart from the credential
manager's refresh locks, so all of them are app-scoped.
"""

from functools import lru_cache

from src.application.commands.handlers.complete_provider_link_handler import (
    CompleteProviderLinkHandler,
)
from src.application.commands.handlers.delete_account_handler import (
    DeleteAccountHandler,
)
from src.application.commands.handlers.start_provider_link_handler import (
    StartProviderLinkHandler,
)
from src.application.commands.handlers.sync_account_handler import SyncAccountHandler
from src.application.commands.handlers.sync_all_accounts_handler import (
    SyncAllAccountsHandler,
)
from src.application.queries.handlers.list_account_activities_handler import (
    ListAccountActivitiesHandler,
)
from src.application.services.credential_manager import CredentialManager
from src.core.config import get_settings
from src.core.container.infrastructure import get_logger, get_sync_lock, get_unit_of_work
from src.core.container.providers import get_provider_factory


@lru_cache()
def get_credential_manager() -> CredentialManager:
    """Get credential manager singleton (owns the per-account refresh locks)."""
    return CredentialManager(
        unit_of_work=get_unit_of_work(),
        logger=get_logger(),
        refresh_margin_seconds=get_settings().token_refresh_margin_seconds,
    )


@lru_cache()
def get_sync_account_handler() -> SyncAccountHandler:
    return SyncAccountHandler(
        unit_of_work=get_unit_of_work(),
        provider_factory=get_provider_factory(),
        credential_manager=get_credential_manager(),
        sync_lock=get_sync_lock(),
        logger=get_logger(),
    )


@lru_cache()
def get_sync_all_accounts_handler() -> SyncAllAccountsHandler:
    return SyncAllAccountsHandler(
        unit_of_work=get_unit_of_work(),
        sync_account_handler=get_sync_account_handler(),
        logger=get_logger(),
    )


@lru_cache()
def get_start_provider_link_handler() -> StartProviderLinkHandler:
    return StartProviderLinkHandler(
        provider_factory=get_provider_factory(),
        logger=get_logger(),
    )


@lru_cache()
def get_complete_provider_link_handler() -> CompleteProviderLinkHandler:
    return CompleteProviderLinkHandler(
        unit_of_work=get_unit_of_work(),
        provider_factory=get_provider_factory(),
        credential_manager=get_credential_manager(),
        logger=get_logger(),
    )


@lru_cache()
def get_delete_account_handler() -> DeleteAccountHandler:
    return DeleteAccountHandler(
        unit_of_work=get_unit_of_work(),
        provider_factory=get_provider_factory(),
        sync_lock=get_sync_lock(),
        logger=get_logger(),
    )


@lru_cache()
def get_list_account_activities_handler() -> ListAccountActivitiesHandler:
    return ListAccountActivitiesHandler(unit_of_work=get_unit_of_work())
