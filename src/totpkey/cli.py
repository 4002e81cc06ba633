"""CLI entry point for totpkey."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from totpkey.errors import TOTPKeyError

console = Console()


def _manager():
    from totpkey.auth.lifecycle import SecretKeyManager
    from totpkey.crypto import AesGcmCrypto
    from totpkey.directory import PostgresDirectory

    return SecretKeyManager(PostgresDirectory(), AesGcmCrypto())


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """totpkey - TOTP shared secret lifecycle management."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


@main.command()
def status() -> None:
    """Show configuration status."""
    from totpkey.config import settings

    console.print("[bold]totpkey Status[/bold]")
    console.print(f"  Database: {settings.database_url.split('@')[-1]}")
    console.print(f"  Master key: {'set' if settings.totp_master_key else '[red]missing[/red]'}")
    console.print(f"  Default encoding: {settings.encoding_method}")
    console.print(f"  Tenant configs: {settings.tenant_config_dir}")


@main.command("init-db")
def init_db() -> None:
    """Create the tenants and user_claims tables."""
    import psycopg

    from totpkey.db import init_schema

    try:
        init_schema()
    except psycopg.Error as e:
        console.print(f"[red]Cannot create schema: {e}[/red]")
        raise SystemExit(1) from e
    console.print("[green]Schema ready[/green]")


@main.command("add-tenant")
@click.argument("domain")
def add_tenant(domain: str) -> None:
    """Register a tenant so its users resolve to a realm."""
    from totpkey.directory import PostgresDirectory

    try:
        PostgresDirectory().add_tenant(domain)
    except TOTPKeyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    console.print(f"Registered tenant {domain}")


@main.command()
@click.argument("username")
@click.option("--refresh", is_flag=True, help="Replace an existing secret.")
@click.option("--decode", is_flag=True, help="Print the plain otpauth:// URI instead of Base64.")
def enroll(username: str, refresh: bool, decode: bool) -> None:
    """Generate (or reuse) a user's secret, store it and print the provisioning URI."""
    from totpkey.auth.totp import decode_provisioning_uri

    manager = _manager()
    try:
        claims = manager.generate_claims(username, refresh)
        if not claims:
            console.print(f"[yellow]No user realm for {username}[/yellow]")
            raise SystemExit(1)
        qr_code_url = manager.commit_claims(claims, username)
    except TOTPKeyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    if decode and qr_code_url:
        qr_code_url = decode_provisioning_uri(qr_code_url)
    click.echo(qr_code_url)


@main.command()
@click.argument("username")
def reset(username: str) -> None:
    """Clear a user's stored secret."""
    try:
        _manager().reset_secret(username)
    except TOTPKeyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    console.print(f"Secret cleared for {username}")


@main.command()
@click.argument("tenant_domain")
def keygen(tenant_domain: str) -> None:
    """Print a fresh secret for a tenant without storing it."""
    try:
        key = _manager().generate_key(tenant_domain)
    except TOTPKeyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e
    click.echo(key.key)


@main.command("master-key")
def master_key() -> None:
    """Print a new base64 AES-256 key for TOTP_MASTER_KEY."""
    from totpkey.crypto import generate_master_key

    click.echo(generate_master_key())


if __name__ == "__main__":
    main()
