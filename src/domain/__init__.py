"""Domain layer - Pure business logic.

Portfolio entities, enums, provider error types and the protocols (ports)
the infrastructure layer implements. No framework or infrastructure
dependencies.

Structure:
- entities/: Account, Holding, Activity
- value_objects/: ProviderCredentials
- protocols/: Provider adapter, repository, unit of work, sync lock, logger
- providers/: Provider registry metadata
"""
