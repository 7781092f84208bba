"""SQLAlchemy models.

Importing this package registers every table on BaseModel.metadata.
"""

from src.infrastructure.persistence.models.account import Account
from src.infrastructure.persistence.models.activity import Activity
from src.infrastructure.persistence.models.holding import Holding

__all__ = [
    "Account",
    "Activity",
    "Holding",
]
