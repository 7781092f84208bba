"""Encryption protocol for stored provider credentials.

Credential columns on the account row (access token, token secret, refresh
token) are persisted as one encrypted blob. The repository encrypts on write
and decrypts on read through this port.

Architecture:
    - Domain layer protocol (port)
    - Infrastructure adapter: src/infrastructure/providers/encryption_service.py
"""

from dataclasses import dataclass
from typing import Any, Protocol

from src.core.errors import DomainError
from src.core.result import Result


# =============================================================================
# Encryption Error Types
# =============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class EncryptionError(DomainError):
    """Base encryption error.

    Does NOT inherit from Exception - used in Result types.
    """


@dataclass(frozen=True, slots=True, kw_only=True)
class EncryptionKeyError(EncryptionError):
    """Key does not meet AES-256 requirements (wrong length)."""


@dataclass(frozen=True, slots=True, kw_only=True)
class DecryptionError(EncryptionError):
    """Wrong key, tampered ciphertext or truncated blob."""


@dataclass(frozen=True, slots=True, kw_only=True)
class SerializationError(EncryptionError):
    """Credentials could not be encoded to, or decoded from, JSON."""


# =============================================================================
# Encryption Protocol (Port)
# =============================================================================


class EncryptionProtocol(Protocol):
    """Protocol for credential encryption.

    Example:
        match encryption.encrypt({"access_token": "..."}):
            case Success(value=blob):
                model.encrypted_credentials = blob
            case Failure(error=error):
                raise RuntimeError(error.message)
    """

    def encrypt(self, data: dict[str, Any]) -> Result[bytes, EncryptionError]:
        """Encrypt a JSON-serializable credentials dictionary."""
        ...

    def decrypt(self, encrypted: bytes) -> Result[dict[str, Any], EncryptionError]:
        """Decrypt bytes produced by encrypt()."""
        ...
