"""Provider Factory Protocol - Abstract factory for provider adapters.

Resolves the adapter for an account's Provider at runtime. Missing provider
configuration is reported as a ConfigurationError value so the orchestrator
can record it like any other sync failure.

Usage:
    class SyncAccountHandler:
        def __init__(self, ..., provider_factory: ProviderFactoryProtocol):
            self._provider_factory = provider_factory

        async def handle(self, cmd: SyncAccount):
            match self._provider_factory.get_provider(account.provider):
                case Success(value=provider):
                    ...
"""

from typing import Protocol

from src.core.errors import ConfigurationError
from src.core.result import Result
from src.domain.enums.provider import Provider
from src.domain.protocols.provider_protocol import ProviderProtocol


class ProviderFactoryProtocol(Protocol):
    """Protocol for provider adapter factory."""

    def get_provider(
        self,
        provider: Provider,
    ) -> Result[ProviderProtocol, ConfigurationError]:
        """Get the adapter for provider.

        Returns:
            Success(ProviderProtocol): Configured adapter.
            Failure(ConfigurationError): Provider has no adapter (manual)
                or required settings are missing.
        """
        ...
