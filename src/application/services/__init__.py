"""Application services shared by command handlers."""

from src.application.services.credential_manager import CredentialManager
from src.application.services.sync_run import SyncRun

__all__ = ["CredentialManager", "SyncRun"]
