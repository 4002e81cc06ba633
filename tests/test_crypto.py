"""Tests for AES-256-GCM encryption."""

from __future__ import annotations

import base64
import os

import pytest

from totpkey.auth.totp import generate_secret
from totpkey.config import Settings
from totpkey.crypto import AesGcmCrypto, generate_master_key
from totpkey.errors import CryptoError
from totpkey.models import KeyRepresentation


@pytest.fixture
def crypto():
    key = base64.b64encode(os.urandom(32)).decode()
    return AesGcmCrypto(master_key=key)


def test_encrypt_decrypt(crypto):
    plaintext = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"
    token = crypto.encrypt(plaintext)
    assert token != plaintext
    assert crypto.decrypt(token) == plaintext


@pytest.mark.parametrize("representation", list(KeyRepresentation))
def test_round_trip_generated_secrets(crypto, representation):
    secret = generate_secret(representation).key
    assert crypto.decrypt(crypto.encrypt(secret)) == secret


def test_encrypt_produces_different_ciphertexts(crypto):
    # Same plaintext should produce different ciphertexts (random nonce)
    t1 = crypto.encrypt("test")
    t2 = crypto.encrypt("test")
    assert t1 != t2


def test_key_from_settings():
    key = generate_master_key()
    crypto = AesGcmCrypto(config=Settings(_env_file=None, totp_master_key=key))
    assert crypto.decrypt(crypto.encrypt("abc")) == "abc"


def test_missing_key_raises():
    crypto = AesGcmCrypto(config=Settings(_env_file=None, totp_master_key=""))
    with pytest.raises(CryptoError, match="TOTP_MASTER_KEY not set"):
        crypto.encrypt("test")


def test_short_key_raises():
    crypto = AesGcmCrypto(master_key=base64.b64encode(b"too short").decode())
    with pytest.raises(CryptoError, match="32 bytes"):
        crypto.encrypt("test")


def test_wrong_key_fails(crypto):
    token = crypto.encrypt("secret")
    other = AesGcmCrypto(master_key=generate_master_key())
    with pytest.raises(CryptoError):
        other.decrypt(token)


def test_tampered_ciphertext_fails(crypto):
    raw = bytearray(base64.b64decode(crypto.encrypt("secret")))
    raw[-1] ^= 0x01
    with pytest.raises(CryptoError):
        crypto.decrypt(base64.b64encode(bytes(raw)).decode())


@pytest.mark.parametrize("token", ["not base64!!", base64.b64encode(b"short").decode()])
def test_garbage_ciphertext_fails(crypto, token):
    with pytest.raises(CryptoError):
        crypto.decrypt(token)
