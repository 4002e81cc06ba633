"""Pydantic models and constants shared across the key lifecycle."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


# === Constants matching the host platform ===

# Configuration value that selects Base64; anything else means Base32.
BASE64 = "BASE64"

# Authenticator property names an AuthenticationContext may override.
ISSUER_PROPERTY = "Issuer"
ENCODING_METHOD_PROPERTY = "encodingMethod"


class KeyRepresentation(StrEnum):
    BASE32 = "BASE32"
    BASE64 = "BASE64"


# === Lifecycle models ===


class TOTPKey(BaseModel):
    """A freshly generated shared secret. Lives for one call only."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(repr=False)
    representation: KeyRepresentation = KeyRepresentation.BASE32


class AuthenticationContext(BaseModel):
    """Per-request state handed over by the authentication pipeline.

    ``properties`` holds authenticator parameters that take precedence over
    tenant configuration (``Issuer``, ``encodingMethod``).
    """

    properties: dict[str, str] = Field(default_factory=dict)

    def get_property(self, name: str) -> str | None:
        value = self.properties.get(name)
        return value or None
