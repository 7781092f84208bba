"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Validation errors (INVALID_*, VALIDATION_*)
- Resource errors (*_NOT_FOUND)
- Conflict errors (*_CONFLICT, *_IN_PROGRESS)
- Configuration errors (CONFIGURATION_*, *_NOT_SUPPORTED, *_MISSING)
- Provider errors (PROVIDER_*)
- Sync errors (SYNC_*)
- Encryption errors (ENCRYPTION_*, DECRYPTION_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_INPUT = "invalid_input"

    # Resource errors
    ACCOUNT_NOT_FOUND = "account_not_found"

    # Conflict errors
    SYNC_IN_PROGRESS = "sync_in_progress"

    # Configuration errors
    CONFIGURATION_MISSING = "configuration_missing"
    PROVIDER_NOT_SUPPORTED = "provider_not_supported"
    CREDENTIALS_MISSING = "credentials_missing"

    # Provider errors
    PROVIDER_AUTHENTICATION_FAILED = "provider_authentication_failed"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROVIDER_RATE_LIMITED = "provider_rate_limited"
    PROVIDER_RESPONSE_INVALID = "provider_response_invalid"

    # Sync errors
    SYNC_RECONCILIATION_FAILED = "sync_reconciliation_failed"

    # Encryption errors
    ENCRYPTION_KEY_INVALID = "encryption_key_invalid"
    DECRYPTION_FAILED = "decryption_failed"
