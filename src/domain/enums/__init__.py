"""Domain enums for business logic.

This package contains enumerations used throughout the domain layer.
Enums are centralized here for discoverability.

Available Enums:
    - AccountType: Investment account classifications
    - ActivityType: Audit trail entry kinds (buy, sell, sync, error)
    - HoldingCategory: Canonical holding categories
    - Provider: Institution backing an account
    - SyncState: Sync state machine states
"""

from src.domain.enums.account_type import AccountType
from src.domain.enums.activity_type import ActivityType
from src.domain.enums.holding_category import HoldingCategory
from src.domain.enums.provider import Provider
from src.domain.enums.sync_state import SyncState

__all__ = [
    "AccountType",
    "ActivityType",
    "HoldingCategory",
    "Provider",
    "SyncState",
]
