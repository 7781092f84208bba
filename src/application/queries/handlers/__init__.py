"""Query handlers."""

from src.application.queries.handlers.list_account_activities_handler import (
    ListAccountActivitiesHandler,
)

__all__ = ["ListAccountActivitiesHandler"]
