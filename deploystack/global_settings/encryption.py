"""Encryption of global setting values flagged ``encrypted``.

Values are sealed with AES-256-GCM under a key derived (scrypt) from the
deployment secret and stored as ``iv:tag:ciphertext``, all hex encoded.
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from deploystack.core.exceptions import ConfigurationException, SettingsEncryptionError

KEY_SALT = b"deploystack-global-settings-salt"
KEY_LENGTH = 32
IV_LENGTH = 16
TAG_LENGTH = 16
ASSOCIATED_DATA = b"deploystack-global-settings"


def derive_key(secret: str) -> bytes:
    """Derive the 256-bit settings key from the deployment secret."""
    if not secret:
        raise ConfigurationException("Encryption secret must not be empty")
    kdf = Scrypt(salt=KEY_SALT, length=KEY_LENGTH, n=2**14, r=8, p=1)
    return kdf.derive(secret.encode("utf-8"))


def looks_encrypted(value: str) -> bool:
    """Whether a stored value has the ``iv:tag:ciphertext`` shape."""
    parts = value.split(":")
    return len(parts) == 3 and len(parts[0]) == IV_LENGTH * 2 and len(parts[1]) == TAG_LENGTH * 2


class SettingsCipher:
    """Encrypts and decrypts setting values with one derived key."""

    def __init__(self, secret: str) -> None:
        self._aead = AESGCM(derive_key(secret))

    def encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_LENGTH)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), ASSOCIATED_DATA)
        data, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return f"{iv.hex()}:{tag.hex()}:{data.hex()}"

    def decrypt(self, token: str) -> str:
        """Decrypt a stored value.

        Raises:
            SettingsEncryptionError: On a malformed value, a wrong secret or tampering
        """
        parts = token.split(":")
        if len(parts) != 3:
            raise SettingsEncryptionError("Invalid encrypted value, expected iv:tag:ciphertext")

        try:
            iv, tag, data = (bytes.fromhex(part) for part in parts)
            return self._aead.decrypt(iv, data + tag, ASSOCIATED_DATA).decode("utf-8")
        except (ValueError, InvalidTag) as e:
            raise SettingsEncryptionError("Failed to decrypt setting value", {"error": type(e).__name__}) from e

    def self_check(self) -> bool:
        """Round-trip a known value; False if the key cannot do so."""
        sample = "deploystack-encryption-check"
        try:
            return self.decrypt(self.encrypt(sample)) == sample
        except SettingsEncryptionError:
            return False
