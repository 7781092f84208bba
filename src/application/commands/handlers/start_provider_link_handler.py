"""StartProviderLink command handler.

Produces what the user needs to consent at the provider:
    - E*TRADE: authorize URL plus the request token pair to keep until the
      verifier comes back
    - Schwab: OAuth 2.0 consent URL
    - Plaid: Link token for the client-side Link flow
"""

from src.application.commands.link_commands import StartProviderLink
from src.core.errors import DomainError
from src.core.result import Failure, Result
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.provider_factory_protocol import ProviderFactoryProtocol
from src.domain.protocols.provider_protocol import AuthorizationStart


class StartProviderLinkHandler:
    """Handler for StartProviderLink command."""

    def __init__(
        self,
        *,
        provider_factory: ProviderFactoryProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._provider_factory = provider_factory
        self._logger = logger

    async def handle(self, cmd: StartProviderLink) -> Result[AuthorizationStart, DomainError]:
        provider_result = self._provider_factory.get_provider(cmd.provider)
        if isinstance(provider_result, Failure):
            return provider_result

        result = await provider_result.value.start_authorization()
        if isinstance(result, Failure):
            self._logger.warning(
                "provider_link_start_failed",
                provider=cmd.provider.value,
                error_code=result.error.code.value,
            )
            return result

        self._logger.info("provider_link_started", provider=cmd.provider.value)
        return result
