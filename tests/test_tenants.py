"""Tests for tenant-aware username handling."""

from __future__ import annotations

import pytest

from totpkey.tenants import SUPER_TENANT_DOMAIN, tenant_aware_username, tenant_domain


@pytest.mark.parametrize(
    ("username", "domain", "name"),
    [
        ("alice@tenant.com", "tenant.com", "alice"),
        ("alice", SUPER_TENANT_DOMAIN, "alice"),
        ("bob@gmail.com@tenant.com", "tenant.com", "bob@gmail.com"),
        ("PRIMARY/carol@tenant.com", "tenant.com", "PRIMARY/carol"),
        ("dave@", SUPER_TENANT_DOMAIN, "dave@"),
    ],
)
def test_split(username, domain, name):
    assert tenant_domain(username) == domain
    assert tenant_aware_username(username) == name
