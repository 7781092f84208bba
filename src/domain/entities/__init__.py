"""Domain entities for business logic.

Pure business logic entities with no framework dependencies.
"""

from src.domain.entities.account import Account
from src.domain.entities.activity import Activity
from src.domain.entities.holding import Holding

__all__ = [
    "Account",
    "Activity",
    "Holding",
]
