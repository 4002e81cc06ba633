"""Per-user TOTP secret lifecycle: generate, reuse, commit and reset.

A user moves between two states as seen through the claim store::

    NO_SECRET --generate_claims + commit_claims--> ACTIVE
    ACTIVE --generate_claims(refresh=True) + commit_claims--> ACTIVE (new secret)
    ACTIVE --generate_claims(refresh=False)--> ACTIVE (read only)
    ACTIVE --reset_secret--> NO_SECRET

Only ciphertext is ever staged or stored. The plaintext secret lives for the
duration of one call, long enough to build the provisioning URI.

The representation (Base32/Base64) is not stored with the ciphertext. It is
re-derived from configuration, so changing a tenant's encoding method after
enrolment leaves existing secrets to be read under the new assumption.
"""

from __future__ import annotations

import logging

from totpkey import config
from totpkey.auth.totp import (
    build_provisioning_uri,
    encode_provisioning_uri,
    generate_secret,
    select_representation,
)
from totpkey.crypto import CryptoGateway
from totpkey.directory import UserDirectory
from totpkey.errors import (
    ConfigResolutionError,
    CryptoError,
    DirectoryAccessError,
    RealmNotFoundError,
)
from totpkey.models import AuthenticationContext, TOTPKey
from totpkey.tenants import tenant_aware_username, tenant_domain

logger = logging.getLogger(__name__)


class SecretKeyManager:
    """Coordinates key generation, encryption and claim storage for users.

    There is no locking. Two concurrent refresh + commit sequences for the
    same user each generate a secret and the later commit wins.
    """

    def __init__(
        self,
        directory: UserDirectory,
        crypto: CryptoGateway,
        settings: config.Settings | None = None,
    ):
        self.directory = directory
        self.crypto = crypto
        self.settings = settings if settings is not None else config.settings

    @property
    def secret_key_claim(self) -> str:
        return self.settings.secret_key_claim

    @property
    def qr_code_claim(self) -> str:
        return self.settings.qr_code_claim

    def generate_key(
        self, tenant_domain: str, context: AuthenticationContext | None = None
    ) -> TOTPKey:
        """Generate a fresh secret in the tenant's configured representation."""
        representation = select_representation(tenant_domain, context, self.settings)
        return generate_secret(representation)

    def generate_claims(
        self,
        username: str,
        refresh: bool = False,
        context: AuthenticationContext | None = None,
    ) -> dict[str, str]:
        """Build the secret-key and QR-code claims for a user without storing them.

        A new secret is generated when none is stored or ``refresh`` is set;
        its ciphertext is staged under the secret-key claim. Otherwise the
        stored secret is decrypted to build the URI and left as is. Returns
        an empty mapping when the user's realm cannot be resolved.
        """
        domain = tenant_domain(username)
        user = tenant_aware_username(username)
        claims: dict[str, str] = {}

        try:
            realm = self.directory.resolve(username)
            if realm is None:
                logger.info("No user realm for tenant %s, skipping claim generation", domain)
                return claims

            stored = self.directory.get_claim_values(realm, user, [self.secret_key_claim])
            stored_secret = stored.get(self.secret_key_claim)

            if not stored_secret or refresh:
                key = self.generate_key(domain, context).key
                claims[self.secret_key_claim] = self.crypto.encrypt(key)
                logger.info("Generated new TOTP secret for %s (tenant %s)", user, domain)
            else:
                decrypted = self.crypto.decrypt(stored_secret)
                key = decrypted if decrypted and decrypted.strip() else ""
                if key:
                    logger.debug("Reusing stored TOTP secret for %s", user)
                else:
                    logger.warning("Stored TOTP secret for %s decrypted to a blank value", user)

            issuer = config.issuer_display_name(domain, context, self.settings)
        except DirectoryAccessError as e:
            raise DirectoryAccessError(
                "Failed while trying to get the user store manager from user realm "
                f"of the user : {user}",
                username=user,
            ) from e
        except CryptoError as e:
            raise CryptoError(f"Failed to encrypt or decrypt the secret key of {user}") from e
        except ConfigResolutionError as e:
            raise ConfigResolutionError(
                f"Cannot find the issuer or encoding method for tenant {domain}"
            ) from e

        uri = build_provisioning_uri(key, user, issuer)
        claims[self.qr_code_claim] = encode_provisioning_uri(uri)
        return claims

    def commit_claims(
        self,
        claims: dict[str, str],
        username: str,
        context: AuthenticationContext | None = None,
    ) -> str | None:
        """Persist staged claims and hand back the encoded provisioning URI.

        The QR-code claim is removed from ``claims`` before anything is
        written. When the realm cannot be resolved the write is skipped and
        the URI is still returned.
        """
        qr_code_url = claims.pop(self.qr_code_claim, None)
        user = tenant_aware_username(username)
        try:
            realm = self.directory.resolve(username)
            if realm is None:
                logger.info(
                    "No user realm for tenant %s, claims for %s not stored",
                    tenant_domain(username),
                    user,
                )
                return qr_code_url
            self.directory.set_claim_values(realm, user, claims)
        except DirectoryAccessError as e:
            raise DirectoryAccessError(
                f"Failed while trying to access user store manager for the user : {user}",
                username=user,
            ) from e
        logger.info("Stored TOTP claims for %s", user)
        return qr_code_url

    def reset_secret(self, username: str) -> bool:
        """Clear the stored secret. Raises RealmNotFoundError if the realm is unknown."""
        user = tenant_aware_username(username)
        try:
            realm = self.directory.resolve(username)
            if realm is None:
                domain = tenant_domain(username)
                raise RealmNotFoundError(
                    f"Can not find the user realm for the given tenant domain : {domain}",
                    tenant_domain=domain,
                )
            self.directory.set_claim_values(realm, user, {self.secret_key_claim: ""})
        except DirectoryAccessError as e:
            raise DirectoryAccessError(
                f"Can not find the user realm for the user : {username}", username=user
            ) from e
        logger.info("Reset TOTP secret for %s", user)
        return True
