"""PostgreSQL connection helpers and schema for the claim store."""

from __future__ import annotations

from typing import Any

import psycopg
import psycopg.rows

from totpkey.config import settings

SCHEMA = (
    """CREATE TABLE IF NOT EXISTS tenants (
           domain     TEXT PRIMARY KEY,
           created_at TIMESTAMPTZ NOT NULL DEFAULT now()
       )""",
    """CREATE TABLE IF NOT EXISTS user_claims (
           tenant_domain TEXT NOT NULL REFERENCES tenants(domain) ON DELETE CASCADE,
           username      TEXT NOT NULL,
           claim_uri     TEXT NOT NULL,
           value         TEXT NOT NULL,
           updated_at    TIMESTAMPTZ NOT NULL DEFAULT now(),
           PRIMARY KEY (tenant_domain, username, claim_uri)
       )""",
)


def sync_conn(database_url: str | None = None) -> psycopg.Connection[dict[str, Any]]:
    """Open a synchronous connection using project settings."""
    return psycopg.connect(database_url or settings.database_url, row_factory=psycopg.rows.dict_row)


def sync_execute(
    query: str,
    params: tuple[Any, ...] | None = None,
    database_url: str | None = None,
) -> list[dict[str, Any]]:
    """Execute query synchronously - opens and closes connection per call."""
    with sync_conn(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(query, params)
            conn.commit()
            if cur.description is None:
                return []
            return cur.fetchall()


def sync_execute_many(
    query: str,
    params_seq: list[tuple[Any, ...]],
    database_url: str | None = None,
) -> None:
    """Run one statement for every parameter tuple inside a single transaction."""
    with sync_conn(database_url) as conn:
        with conn.cursor() as cur:
            cur.executemany(query, params_seq)
        conn.commit()


def init_schema(database_url: str | None = None) -> None:
    with sync_conn(database_url) as conn:
        with conn.cursor() as cur:
            for stmt in SCHEMA:
                cur.execute(stmt)
        conn.commit()
