"""Result types for railway-oriented programming.

Operations that can fail return a Result instead of raising, which keeps
error handling explicit at every step of a sync.

Usage:
    async def fetch_accounts(...) -> Result[list[dict], ProviderError]:
        ...

    result = await provider.fetch_accounts(credentials)
    match result:
        case Success(value=accounts):
            ...
        case Failure(error=error):
            logger.warning("fetch_failed", error=str(error))
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


# Type alias for Result union
Result: TypeAlias = Success[T] | Failure[E]
