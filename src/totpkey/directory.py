"""User directory access: realm resolution and per-user claim storage.

The lifecycle manager talks to a ``UserDirectory``. Two implementations ship
here: an in-memory one for tests and embedding, and a PostgreSQL one backed
by the ``tenants`` / ``user_claims`` tables from ``totpkey.db``.

Writes are plain upserts. Concurrent writers for the same claim get
last-write-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

import psycopg

from totpkey import db
from totpkey.errors import DirectoryAccessError
from totpkey.tenants import tenant_domain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Realm:
    """Handle to the user store of one tenant."""
    tenant_domain: str


class UserDirectory(Protocol):
    def resolve(self, username: str) -> Realm | None: ...

    def get_claim_values(
        self, realm: Realm, username: str, claim_uris: Iterable[str]
    ) -> dict[str, str]: ...

    def set_claim_values(self, realm: Realm, username: str, claims: Mapping[str, str]) -> None: ...


class InMemoryDirectory:
    """Dictionary-backed directory. Only registered tenants resolve."""

    def __init__(self, tenants: Iterable[str] = ()):
        self._claims: dict[str, dict[str, dict[str, str]]] = {t: {} for t in tenants}

    def add_tenant(self, domain: str) -> Realm:
        self._claims.setdefault(domain, {})
        return Realm(domain)

    def resolve(self, username: str) -> Realm | None:
        domain = tenant_domain(username)
        if domain not in self._claims:
            return None
        return Realm(domain)

    def _store(self, realm: Realm) -> dict[str, dict[str, str]]:
        try:
            return self._claims[realm.tenant_domain]
        except KeyError:
            raise DirectoryAccessError(f"Unknown realm: {realm.tenant_domain}") from None

    def get_claim_values(
        self, realm: Realm, username: str, claim_uris: Iterable[str]
    ) -> dict[str, str]:
        user = self._store(realm).get(username, {})
        return {uri: user[uri] for uri in claim_uris if uri in user}

    def set_claim_values(self, realm: Realm, username: str, claims: Mapping[str, str]) -> None:
        self._store(realm).setdefault(username, {}).update(claims)


class PostgresDirectory:
    """Directory backed by PostgreSQL. A tenant resolves once it has a row in ``tenants``."""

    def __init__(self, database_url: str | None = None):
        self.database_url = database_url

    def add_tenant(self, domain: str) -> Realm:
        try:
            db.sync_execute(
                "INSERT INTO tenants (domain) VALUES (%s) ON CONFLICT (domain) DO NOTHING",
                (domain,),
                self.database_url,
            )
        except psycopg.Error as e:
            raise DirectoryAccessError(f"Failed to register tenant {domain}") from e
        logger.info("Registered tenant %s", domain)
        return Realm(domain)

    def resolve(self, username: str) -> Realm | None:
        domain = tenant_domain(username)
        try:
            rows = db.sync_execute(
                "SELECT domain FROM tenants WHERE domain = %s",
                (domain,),
                self.database_url,
            )
        except psycopg.Error as e:
            raise DirectoryAccessError(f"Failed to resolve realm for tenant {domain}") from e
        if not rows:
            return None
        return Realm(domain)

    def get_claim_values(
        self, realm: Realm, username: str, claim_uris: Iterable[str]
    ) -> dict[str, str]:
        uris = list(claim_uris)
        if not uris:
            return {}
        try:
            rows = db.sync_execute(
                """SELECT claim_uri, value FROM user_claims
                   WHERE tenant_domain = %s AND username = %s AND claim_uri = ANY(%s)""",
                (realm.tenant_domain, username, uris),
                self.database_url,
            )
        except psycopg.Error as e:
            raise DirectoryAccessError(
                f"Failed to read claims for user : {username}", username=username
            ) from e
        return {r["claim_uri"]: r["value"] for r in rows}

    def set_claim_values(self, realm: Realm, username: str, claims: Mapping[str, str]) -> None:
        if not claims:
            return
        try:
            db.sync_execute_many(
                """INSERT INTO user_claims (tenant_domain, username, claim_uri, value)
                   VALUES (%s, %s, %s, %s)
                   ON CONFLICT (tenant_domain, username, claim_uri)
                   DO UPDATE SET value = EXCLUDED.value, updated_at = now()""",
                [(realm.tenant_domain, username, uri, value) for uri, value in claims.items()],
                self.database_url,
            )
        except psycopg.Error as e:
            raise DirectoryAccessError(
                f"Failed to write claims for user : {username}", username=username
            ) from e
