"""Queries - Read operations that fetch data.

Queries represent a request for information. They are immutable dataclasses
with question-like names. Queries NEVER change state.
"""

from src.application.queries.activity_queries import ListAccountActivities

__all__ = ["ListAccountActivities"]
