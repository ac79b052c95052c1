"""
Encryption at Rest for Persisted Assessments.

Uses Fernet symmetric encryption (AES-128-CBC + HMAC-SHA256).

The scoring engine never encrypts anything itself: a cipher is injected
into the result store, which applies it at the storage boundary.
"""

from typing import Optional

import structlog
from cryptography.fernet import Fernet, InvalidToken

from fairwatch.core.config import Settings
from fairwatch.core.exceptions import ErrorCode, PersistenceError

logger = structlog.get_logger(__name__)


class FernetCipher:
    """Payload cipher backed by a Fernet key."""

    def __init__(self, key: str | bytes):
        """
        Initialize with a Fernet key.

        Args:
            key: 32 url-safe base64-encoded bytes, as produced by generate_key()
        """
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @classmethod
    def generate_key(cls) -> str:
        """Generate a new Fernet key."""
        return Fernet.generate_key().decode("utf-8")

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["FernetCipher"]:
        """Build a cipher from configuration; None when no key is configured."""
        if not settings.encryption_key:
            logger.warning(
                "encryption_key_not_set",
                msg="Assessment payloads will be stored unencrypted",
            )
            return None
        return cls(settings.encryption_key)

    def encrypt(self, plaintext: bytes) -> bytes:
        return self._fernet.encrypt(plaintext)

    def decrypt(self, ciphertext: bytes) -> bytes:
        try:
            return self._fernet.decrypt(ciphertext)
        except InvalidToken as e:
            logger.error("decryption_failed", msg="Invalid token, key mismatch or corrupted data")
            raise PersistenceError(
                "Stored assessment could not be decrypted",
                operation="decrypt",
                code=ErrorCode.DECRYPTION_FAILED,
            ) from e
