"""TOTP secret generation and lifecycle."""

from .lifecycle import SecretKeyManager
from .totp import build_provisioning_uri, generate_secret, select_representation

__all__ = [
    "SecretKeyManager",
    "build_provisioning_uri",
    "generate_secret",
    "select_representation",
]
