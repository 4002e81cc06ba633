"""Split fully qualified usernames into tenant domain and tenant-aware name.

``alice@tenant.com`` belongs to ``tenant.com`` as ``alice``. A username
without a tenant part belongs to the super tenant. Email-style usernames
keep everything before the last ``@``::

    bob@gmail.com@tenant.com -> ("tenant.com", "bob@gmail.com")
"""

from __future__ import annotations

SUPER_TENANT_DOMAIN = "carbon.super"


def _split(username: str) -> tuple[str, str]:
    name, sep, domain = username.rpartition("@")
    if not sep or not name or not domain:
        return username, SUPER_TENANT_DOMAIN
    return name, domain


def tenant_domain(username: str) -> str:
    return _split(username)[1]


def tenant_aware_username(username: str) -> str:
    return _split(username)[0]
