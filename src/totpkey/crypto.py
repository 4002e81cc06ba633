"""AES-256-GCM encryption of TOTP secrets at rest."""

from __future__ import annotations

import base64
import binascii
import os
from typing import Protocol

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from totpkey.config import Settings, settings
from totpkey.errors import CryptoError

_NONCE_SIZE = 12  # 96-bit nonce for AES-GCM


class CryptoGateway(Protocol):
    def encrypt(self, plaintext: str) -> str: ...

    def decrypt(self, token: str) -> str: ...


def _decode_key(raw: str) -> bytes:
    if not raw:
        raise CryptoError("TOTP_MASTER_KEY not set")
    try:
        key = base64.b64decode(raw, validate=True)
    except binascii.Error as e:
        raise CryptoError("TOTP_MASTER_KEY is not valid base64") from e
    if len(key) != 32:
        raise CryptoError("TOTP_MASTER_KEY must be 32 bytes (base64-encoded)")
    return key


class AesGcmCrypto:
    """Encrypts strings to base64(nonce + ciphertext).

    The key is read lazily so a missing key only fails the operations that
    need it.
    """

    def __init__(self, master_key: str | None = None, config: Settings | None = None):
        self._master_key = master_key
        self._config = config

    def _key(self) -> bytes:
        if self._master_key is not None:
            return _decode_key(self._master_key)
        config = self._config if self._config is not None else settings
        return _decode_key(config.totp_master_key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string. Returns base64(nonce + ciphertext)."""
        key = self._key()
        nonce = os.urandom(_NONCE_SIZE)
        ct = AESGCM(key).encrypt(nonce, plaintext.encode(), None)
        return base64.b64encode(nonce + ct).decode()

    def decrypt(self, token: str) -> str:
        """Decrypt a base64(nonce + ciphertext) token back to plaintext."""
        key = self._key()
        try:
            raw = base64.b64decode(token, validate=True)
        except binascii.Error as e:
            raise CryptoError("Ciphertext is not valid base64") from e
        if len(raw) <= _NONCE_SIZE:
            raise CryptoError("Ciphertext too short")
        nonce, ct = raw[:_NONCE_SIZE], raw[_NONCE_SIZE:]
        try:
            return AESGCM(key).decrypt(nonce, ct, None).decode()
        except (InvalidTag, UnicodeDecodeError) as e:
            raise CryptoError("Ciphertext failed authentication") from e


def generate_master_key() -> str:
    """Fresh base64-encoded 256-bit key suitable for TOTP_MASTER_KEY."""
    return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode()
