"""TOTP shared-secret generation and provisioning URIs.

Secrets carry 160 bits of entropy, rendered as Base32 (pyotp) or standard
Base64 depending on the tenant's configured encoding method. Verifying codes
is the authenticator's job and is not done here.
"""

from __future__ import annotations

import base64
import secrets

import pyotp

from totpkey import config
from totpkey.models import BASE64, AuthenticationContext, KeyRepresentation, TOTPKey

SECRET_BYTES = 20  # 160 bits, as recommended by RFC 4226
BASE32_LENGTH = 32  # 32 Base32 chars = 160 bits


def select_representation(
    tenant_domain: str,
    context: AuthenticationContext | None = None,
    settings: config.Settings | None = None,
) -> KeyRepresentation:
    """BASE64 only when configured as exactly "BASE64"; everything else is BASE32."""
    method = config.encoding_method(tenant_domain, context, settings)
    if method == BASE64:
        return KeyRepresentation.BASE64
    return KeyRepresentation.BASE32


def _random_key(representation: KeyRepresentation) -> str:
    if representation == KeyRepresentation.BASE64:
        raw = secrets.token_bytes(SECRET_BYTES)
        if not any(raw):
            return ""
        return base64.b64encode(raw).decode()
    key = pyotp.random_base32(length=BASE32_LENGTH)
    # "A" is the zero digit in Base32
    if key.strip("A") == "":
        return ""
    return key


def generate_secret(representation: KeyRepresentation = KeyRepresentation.BASE32) -> TOTPKey:
    """Generate a new random secret. Never returns an empty or all-zero key."""
    key = ""
    while not key:
        key = _random_key(representation)
    return TOTPKey(key=key, representation=representation)


def build_provisioning_uri(secret: str, username: str, issuer: str) -> str:
    """Get the otpauth:// URI for QR code enrollment.

    The format is fixed by the user store consumers, so the values are
    inserted verbatim rather than percent-encoded.
    """
    return f"otpauth://totp/{issuer}:{username}?secret={secret}&issuer={issuer}"


def encode_provisioning_uri(uri: str) -> str:
    return base64.b64encode(uri.encode()).decode()


def decode_provisioning_uri(encoded: str) -> str:
    return base64.b64decode(encoded).decode()
