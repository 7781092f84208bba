"""Database persistence infrastructure.

This module provides database-related functionality including:
- Base model for all database entities
- Database connection and session management
- Portfolio repository and unit of work
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.unit_of_work import SqlAlchemyPortfolioUnitOfWork

__all__ = [
    "BaseModel",
    "Database",
    "SqlAlchemyPortfolioUnitOfWork",
]
