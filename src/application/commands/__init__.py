"""Commands - Write operations that change state.

Commands represent user intent to perform an action. They are immutable
dataclasses with imperative names (SyncAccount, DeleteAccount).

Each command has a corresponding handler in commands/handlers/.
"""

from src.application.commands.account_commands import DeleteAccount
from src.application.commands.link_commands import (
    CompleteProviderLink,
    StartProviderLink,
)
from src.application.commands.sync_commands import SyncAccount, SyncAllAccounts

__all__ = [
    "CompleteProviderLink",
    "DeleteAccount",
    "StartProviderLink",
    "SyncAccount",
    "SyncAllAccounts",
]
