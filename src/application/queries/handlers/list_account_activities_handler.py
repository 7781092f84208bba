"""ListAccountActivities query handler."""

from src.application.queries.activity_queries import ListAccountActivities
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Activity
from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork


class ListAccountActivitiesHandler:
    """Handler for ListAccountActivities query.

    Returns:
        Success(list[Activity]): Newest first.
        Failure(NotFoundError): Account does not exist.
        Failure(ValidationError): Non-positive limit.
    """

    def __init__(self, *, unit_of_work: PortfolioUnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    async def handle(self, query: ListAccountActivities) -> Result[list[Activity], DomainError]:
        if query.limit is not None and query.limit <= 0:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message="limit must be positive",
                    field="limit",
                )
            )

        async with self._unit_of_work.begin() as repo:
            account = await repo.get_account(query.account_id)
            if account is None:
                return Failure(
                    error=NotFoundError(
                        code=ErrorCode.ACCOUNT_NOT_FOUND,
                        message=f"Account {query.account_id} not found",
                        resource_type="Account",
                        resource_id=str(query.account_id),
                    )
                )
            activities = await repo.get_activities_by_account(
                query.account_id,
                limit=query.limit,
            )

        return Success(value=activities)
