"""Command handlers."""

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

__all__ = [
    "CompleteProviderLinkHandler",
    "DeleteAccountHandler",
    "StartProviderLinkHandler",
    "SyncAccountHandler",
    "SyncAllAccountsHandler",
]
