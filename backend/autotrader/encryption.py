"""
Encryption utilities for storing exchange credentials at rest.

Uses AES-256-GCM (authenticated encryption, 128-bit tag). Every call to
encrypt draws a fresh 96-bit nonce; the stored value is
base64(nonce || ciphertext || tag).
"""

import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from autotrader.config import settings
from autotrader.exceptions import ConfigurationError, CryptoError

logger = logging.getLogger(__name__)

NONCE_SIZE = 12  # 96 bits, the GCM standard nonce length
TAG_SIZE = 16
KEY_SIZE = 32  # AES-256


class CredentialVault:
    """Encrypts and decrypts credential strings with a fixed master key."""

    def __init__(self, master_key: bytes):
        if len(master_key) != KEY_SIZE:
            raise ConfigurationError(
                f"Encryption master key must be {KEY_SIZE} bytes, got {len(master_key)}"
            )
        self._aesgcm = AESGCM(master_key)

    @classmethod
    def from_base64(cls, encoded_key: str) -> "CredentialVault":
        if not encoded_key:
            raise ConfigurationError(
                "ENCRYPTION_MASTER_KEY not set in .env. "
                "Generate one with: openssl rand -base64 32"
            )
        try:
            key = base64.b64decode(encoded_key, validate=True)
        except (binascii.Error, ValueError):
            raise ConfigurationError("ENCRYPTION_MASTER_KEY is not valid base64")
        return cls(key)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a plaintext string.

        Args:
            plaintext: The value to encrypt (e.g., a Bitvavo API secret)

        Returns:
            Base64 string holding the nonce followed by ciphertext and tag
        """
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, blob: str) -> str:
        """
        Decrypt a value produced by encrypt().

        Raises:
            CryptoError: input is not base64, is truncated, or fails tag
                verification (tampering or wrong key)
        """
        try:
            raw = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError, TypeError):
            logger.error("Failed to decrypt value: input is not valid base64")
            raise CryptoError("Decryption failed: invalid encoding")

        if len(raw) < NONCE_SIZE + TAG_SIZE:
            logger.error("Failed to decrypt value: input too short")
            raise CryptoError("Decryption failed: truncated input")

        nonce, ciphertext = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        try:
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag:
            logger.error("Failed to decrypt value: authentication tag mismatch or wrong encryption key")
            raise CryptoError("Decryption failed: authentication failed")
        return plaintext.decode("utf-8")


_vault = None


def get_vault() -> CredentialVault:
    """Get or create the CredentialVault from the configured master key."""
    global _vault
    if _vault is None:
        _vault = CredentialVault.from_base64(settings.encryption_master_key)
    return _vault


def encrypt_value(plaintext: str) -> str:
    return get_vault().encrypt(plaintext)


def decrypt_value(ciphertext: str) -> str:
    return get_vault().decrypt(ciphertext)
