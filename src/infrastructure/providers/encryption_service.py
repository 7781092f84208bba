"""Encryption service for stored provider credentials.

AES-256-GCM encryption of the credential material kept on account rows
(access token, OAuth1 token secret, refresh token).

Security Properties:
    - Confidentiality: Only holder of key can decrypt
    - Integrity: Tampering is detected via GCM authentication tag
    - Uniqueness: Random IV per encryption prevents pattern analysis

Format:
    Encrypted bytes = IV (12 bytes) || ciphertext || auth_tag (16 bytes)
"""

import json
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.protocols.encryption_protocol import (
    DecryptionError,
    EncryptionError,
    EncryptionKeyError,
    SerializationError,
)

KEY_SIZE = 32


class EncryptionService:
    """AES-256-GCM encryption service for provider credentials.

    Usage:
        >>> match EncryptionService.create(settings.encryption_key):
        ...     case Success(value=service):
        ...         blob = service.encrypt({"access_token": "abc123"})
        ...     case Failure(error=error):
        ...         ...

    Thread Safety:
        The AESGCM instance can be used concurrently.
    """

    IV_SIZE = 12  # 96 bits - NIST recommended for GCM
    MIN_ENCRYPTED_SIZE = 12 + 16  # IV + auth tag

    def __init__(self, aesgcm: AESGCM) -> None:
        """Initialize with pre-validated AESGCM instance.

        Use EncryptionService.create() factory instead of direct construction.
        """
        self._aesgcm = aesgcm

    @classmethod
    def create(cls, key: str | bytes) -> Result["EncryptionService", EncryptionKeyError]:
        """Create encryption service with validated key.

        Args:
            key: 32-byte key, or a 32-character string (UTF-8 encoded),
                as configured in ``encryption_key``.

        Returns:
            Success(EncryptionService) if key is valid.
            Failure(EncryptionKeyError) if key is invalid.
        """
        raw = key.encode("utf-8") if isinstance(key, str) else key
        if len(raw) != KEY_SIZE:
            return Failure(
                error=EncryptionKeyError(
                    code=ErrorCode.ENCRYPTION_KEY_INVALID,
                    message=(
                        f"Encryption key must be exactly {KEY_SIZE} bytes (256 bits), "
                        f"got {len(raw)} bytes"
                    ),
                    details={"expected_length": str(KEY_SIZE), "actual_length": str(len(raw))},
                )
            )

        return Success(value=cls(AESGCM(raw)))

    def encrypt(self, data: dict[str, Any]) -> Result[bytes, EncryptionError]:
        """Encrypt a credentials dictionary to bytes.

        Returns:
            Success(bytes): IV || ciphertext || tag.
            Failure(SerializationError): Data is not JSON-serializable.
        """
        try:
            plaintext = json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            return Failure(
                error=SerializationError(
                    code=ErrorCode.INVALID_INPUT,
                    message=f"Failed to serialize credentials to JSON: {e}",
                )
            )

        iv = os.urandom(self.IV_SIZE)
        ciphertext = self._aesgcm.encrypt(iv, plaintext, associated_data=None)
        return Success(value=iv + ciphertext)

    def decrypt(self, encrypted: bytes) -> Result[dict[str, Any], EncryptionError]:
        """Decrypt bytes back to the credentials dictionary.

        Returns:
            Success(dict): Original dictionary.
            Failure(DecryptionError): Wrong key, tampered or truncated data.
            Failure(SerializationError): Decrypted data is not a JSON object.
        """
        if len(encrypted) < self.MIN_ENCRYPTED_SIZE:
            return Failure(
                error=DecryptionError(
                    code=ErrorCode.DECRYPTION_FAILED,
                    message=(
                        f"Encrypted data too short: {len(encrypted)} bytes "
                        f"(minimum {self.MIN_ENCRYPTED_SIZE} bytes)"
                    ),
                )
            )

        iv = encrypted[: self.IV_SIZE]
        ciphertext = encrypted[self.IV_SIZE :]

        try:
            plaintext = self._aesgcm.decrypt(iv, ciphertext, associated_data=None)
        except InvalidTag:
            return Failure(
                error=DecryptionError(
                    code=ErrorCode.DECRYPTION_FAILED,
                    message="Failed to decrypt credentials: invalid key or tampered data",
                )
            )

        try:
            data = json.loads(plaintext.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Failure(
                error=SerializationError(
                    code=ErrorCode.INVALID_INPUT,
                    message=f"Failed to deserialize decrypted credentials: {e}",
                )
            )

        if not isinstance(data, dict):
            return Failure(
                error=SerializationError(
                    code=ErrorCode.INVALID_INPUT,
                    message="Decrypted credentials are not a JSON object",
                )
            )
        return Success(value=data)
