"""totpkey - TOTP shared secret lifecycle for multi-factor authentication."""

__version__ = "0.1.0"
