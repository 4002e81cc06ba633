"""Error kinds raised by the secret key lifecycle."""

from __future__ import annotations


class TOTPKeyError(Exception):
    """Base lifecycle error. Every collaborator failure surfaces as a subclass."""


class DirectoryAccessError(TOTPKeyError):
    """User store lookup or write failed."""

    def __init__(self, message: str, *, username: str | None = None):
        super().__init__(message)
        self.username = username


class CryptoError(TOTPKeyError):
    """Encrypting or decrypting the secret failed."""


class ConfigResolutionError(TOTPKeyError):
    """Issuer name or encoding method could not be resolved."""


class RealmNotFoundError(TOTPKeyError):
    """The tenant's user realm could not be resolved."""

    def __init__(self, message: str, *, tenant_domain: str):
        super().__init__(message)
        self.tenant_domain = tenant_domain
