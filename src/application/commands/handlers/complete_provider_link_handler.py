"""CompleteProviderLink command handler.

Exchanges the grant returned by the provider (E*TRADE verifier, Schwab
authorization code, Plaid public token) for credentials, creates the
account when none is given, and stores the credentials through the
CredentialManager.
"""

from uuid import UUID

from uuid_extensions import uuid7

from src.application.commands.link_commands import CompleteProviderLink
from src.application.services.credential_manager import CredentialManager
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Account
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork
from src.domain.protocols.provider_factory_protocol import ProviderFactoryProtocol
from src.domain.providers.registry import get_provider_metadata


class CompleteProviderLinkHandler:
    """Handler for CompleteProviderLink command.

    Dependencies (injected via constructor):
        - PortfolioUnitOfWork: account lookup and creation
        - ProviderFactoryProtocol: adapter per provider
        - CredentialManager: stores the exchanged credentials
        - LoggerProtocol: structured logging
    """

    def __init__(
        self,
        *,
        unit_of_work: PortfolioUnitOfWork,
        provider_factory: ProviderFactoryProtocol,
        credential_manager: CredentialManager,
        logger: LoggerProtocol,
    ) -> None:
        self._unit_of_work = unit_of_work
        self._provider_factory = provider_factory
        self._credential_manager = credential_manager
        self._logger = logger

    async def handle(self, cmd: CompleteProviderLink) -> Result[Account, DomainError]:
        """Handle CompleteProviderLink command.

        Returns:
            Success(Account): Linked account (is_connected = True).
            Failure(NotFoundError): account_id given but unknown.
            Failure(ValidationError): Account belongs to another provider.
            Failure(DomainError): Provider or configuration failure.
        """
        # Validate the target before spending the single-use grant
        if cmd.account_id is not None:
            async with self._unit_of_work.begin() as repo:
                existing = await repo.get_account(cmd.account_id)
            if existing is None:
                return Failure(error=_account_not_found(cmd.account_id))
            if existing.provider != cmd.provider:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_INPUT,
                        message=(
                            f"Account belongs to {existing.provider.value}, "
                            f"not {cmd.provider.value}"
                        ),
                        field="provider",
                    )
                )

        provider_result = self._provider_factory.get_provider(cmd.provider)
        if isinstance(provider_result, Failure):
            return provider_result

        credentials_result = await provider_result.value.complete_authorization(cmd.grant)
        if isinstance(credentials_result, Failure):
            self._logger.warning(
                "provider_link_exchange_failed",
                provider=cmd.provider.value,
                error_code=credentials_result.error.code.value,
            )
            return credentials_result

        account_id = cmd.account_id
        if account_id is None:
            account_id = await self._create_account(cmd)

        link_result = await self._credential_manager.link(account_id, credentials_result.value)
        if isinstance(link_result, Failure):
            return link_result

        self._logger.info(
            "provider_link_completed",
            provider=cmd.provider.value,
            account_id=str(account_id),
            created=cmd.account_id is None,
        )
        return Success(value=link_result.value)

    async def _create_account(self, cmd: CompleteProviderLink) -> UUID:
        metadata = get_provider_metadata(cmd.provider)
        default_name = metadata.display_name if metadata else cmd.provider.value
        account = Account(
            id=uuid7(),
            name=cmd.name or default_name,
            provider=cmd.provider,
            account_type=cmd.account_type,
        )
        async with self._unit_of_work.begin() as repo:
            created = await repo.create_account(account)
        return created.id


def _account_not_found(account_id: UUID) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.ACCOUNT_NOT_FOUND,
        message=f"Account {account_id} not found",
        resource_type="Account",
        resource_id=str(account_id),
    )
