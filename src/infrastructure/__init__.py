"""Infrastructure layer - Adapters and external integrations.

Implementations of the domain protocols (ports):
- providers/: Brokerage adapters (E*TRADE, Schwab, Plaid), HTTP client base,
  credential encryption
- persistence/: SQLAlchemy models, portfolio repository, unit of work
- locking/: Per-account sync locks (in-process and Redis)
- logging/: structlog console adapter

The infrastructure layer depends on the domain layer (implements protocols)
but the domain layer does NOT depend on infrastructure.
"""
