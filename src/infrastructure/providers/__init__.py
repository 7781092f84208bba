"""Financial provider integrations.

One package per provider (etrade, schwab, plaid), each implementing
ProviderProtocol, plus the shared HTTP base client, normalization helpers,
credential encryption and the provider factory.
"""
