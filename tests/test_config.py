"""Tests for configuration loading and tenant overrides."""

from __future__ import annotations

import pytest

from totpkey.config import (
    TENANTS_DIR,
    Settings,
    encoding_method,
    issuer_display_name,
    load_tenant_config,
)
from totpkey.errors import ConfigResolutionError
from totpkey.models import AuthenticationContext


@pytest.fixture
def cfg(tmp_path):
    return Settings(_env_file=None, tenant_config_dir=tmp_path)


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.secret_key_claim == "http://wso2.org/claims/identity/secretkey"
    assert s.qr_code_claim == "http://wso2.org/claims/identity/qrcodeurl"
    assert s.encoding_method == "BASE32"
    assert s.issuer == ""


def test_tenants_dir_exists():
    assert TENANTS_DIR.exists(), f"Tenants directory not found at {TENANTS_DIR}"


def test_load_super_tenant_config():
    config = load_tenant_config("carbon.super", Settings(_env_file=None))
    assert config["issuer"] == "Carbon"
    assert config["encoding_method"] == "BASE32"


def test_load_missing_tenant(cfg):
    assert load_tenant_config("nowhere.example", cfg) == {}


def test_load_empty_tenant_file(cfg, tmp_path):
    (tmp_path / "empty.org.yaml").write_text("")
    assert load_tenant_config("empty.org", cfg) == {}


def test_load_malformed_tenant_file(cfg, tmp_path):
    (tmp_path / "broken.org.yaml").write_text("issuer: [unclosed\n")
    with pytest.raises(ConfigResolutionError):
        load_tenant_config("broken.org", cfg)


def test_load_non_mapping_tenant_file(cfg, tmp_path):
    (tmp_path / "list.org.yaml").write_text("- a\n- b\n")
    with pytest.raises(ConfigResolutionError, match="mapping"):
        load_tenant_config("list.org", cfg)


@pytest.mark.parametrize("domain", ["../outside", "nested/tenant.com", "/etc/passwd", ""])
def test_tenant_domain_cannot_leave_config_dir(tmp_path, domain):
    tenants = tmp_path / "tenants"
    tenants.mkdir()
    (tmp_path / "outside.yaml").write_text("issuer: Evil\nencoding_method: BASE64\n")
    cfg = Settings(_env_file=None, tenant_config_dir=tenants)
    with pytest.raises(ConfigResolutionError, match="Invalid tenant domain"):
        load_tenant_config(domain, cfg)
    with pytest.raises(ConfigResolutionError):
        encoding_method(domain, config=cfg)


def test_issuer_falls_back_to_tenant_domain(cfg):
    assert issuer_display_name("tenant.com", config=cfg) == "tenant.com"


def test_issuer_uses_settings_default(tmp_path):
    cfg = Settings(_env_file=None, tenant_config_dir=tmp_path, issuer="Acme")
    assert issuer_display_name("tenant.com", config=cfg) == "Acme"


def test_issuer_precedence(cfg, tmp_path):
    (tmp_path / "tenant.com.yaml").write_text("issuer: Tenant Co\n")
    assert issuer_display_name("tenant.com", config=cfg) == "Tenant Co"

    ctx = AuthenticationContext(properties={"Issuer": "Login Flow"})
    assert issuer_display_name("tenant.com", ctx, cfg) == "Login Flow"


def test_blank_context_property_is_ignored(cfg, tmp_path):
    (tmp_path / "tenant.com.yaml").write_text("issuer: Tenant Co\n")
    ctx = AuthenticationContext(properties={"Issuer": ""})
    assert issuer_display_name("tenant.com", ctx, cfg) == "Tenant Co"


def test_encoding_method_precedence(cfg, tmp_path):
    assert encoding_method("tenant.com", config=cfg) == "BASE32"

    (tmp_path / "tenant.com.yaml").write_text("encoding_method: BASE64\n")
    assert encoding_method("tenant.com", config=cfg) == "BASE64"

    ctx = AuthenticationContext(properties={"encodingMethod": "BASE32"})
    assert encoding_method("tenant.com", ctx, cfg) == "BASE32"


def test_non_string_tenant_value(cfg, tmp_path):
    (tmp_path / "tenant.com.yaml").write_text("issuer: 42\n")
    with pytest.raises(ConfigResolutionError):
        issuer_display_name("tenant.com", config=cfg)
