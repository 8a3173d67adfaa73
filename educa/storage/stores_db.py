"""
Postgres-backed key/value store for deployments that keep state in a database.

Why: Some schools run the platform on a shared host where the working
directory is not durable. Storing the same JSON documents in a single table
keeps the storage layout identical to the file store.

Schema:
    create table <table> (key text primary key, value text not null,
                          updated_at timestamptz not null default now())

Note: This module uses psycopg3. It is imported only when enabled via
`EDUCA_STORE=db`. Tests use a fake driver.
"""
from __future__ import annotations

import logging
import os
import re
from typing import Any, Optional

from educa.storage.ports import StorageUnavailable
from educa.storage.stores import decode_value, encode_value

try:
    import psycopg
    from psycopg import sql as _sql
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional dependency in dev
    psycopg = None  # type: ignore
    _sql = None  # type: ignore
    HAVE_PSYCOPG = False

_log = logging.getLogger("educa.storage")

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$")


class DBStore:
    """Key/value store on a single Postgres table.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Falls back to `DATABASE_URL`.
    table:
        Schema-qualified table name. Defaults to `public.educa_kv`.
    """

    def __init__(self, dsn: str | None = None, table: str = "public.educa_kv") -> None:
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBStore")
        self._dsn = dsn or os.getenv("DATABASE_URL", "")
        if not self._dsn:
            raise RuntimeError("No database DSN provided for DBStore")
        if not _TABLE_RE.match(table or ""):
            raise ValueError("Invalid table name")
        self._table = table

    def _schema_and_name(self) -> tuple[str, str]:
        if "." in self._table:
            schema, name = self._table.split(".", 1)
        else:
            schema, name = "public", self._table
        return schema, name

    def _stmt(self, template: str):
        schema, name = self._schema_and_name()
        return _sql.SQL(template).format(_sql.Identifier(schema), _sql.Identifier(name))

    def _execute(self, template: str, params: tuple = (), *, fetch: bool = False):
        try:
            with psycopg.connect(self._dsn, autocommit=True) as conn:
                with conn.cursor() as cur:
                    cur.execute(self._stmt(template), params)
                    return cur.fetchone() if fetch else None
        except psycopg.Error as exc:
            raise StorageUnavailable(f"database error: {exc.__class__.__name__}") from exc

    def ensure_table(self) -> None:
        self._execute(
            "create table if not exists {}.{} ("
            "key text primary key, value text not null, "
            "updated_at timestamptz not null default now())"
        )

    def load(self, key: str) -> Optional[Any]:
        row = self._execute("select value from {}.{} where key = %s", (key,), fetch=True)
        if not row:
            return None
        return decode_value(key, row[0])

    def save(self, key: str, value: Any) -> None:
        self._execute(
            "insert into {}.{} (key, value, updated_at) values (%s, %s, now()) "
            "on conflict (key) do update set value = excluded.value, updated_at = now()",
            (key, encode_value(value)),
        )

    def delete(self, key: str) -> None:
        self._execute("delete from {}.{} where key = %s", (key,))

    def clear(self) -> None:
        self._execute("delete from {}.{}")
        _log.info("storage.cleared table=%s", self._table)


__all__ = ["DBStore", "HAVE_PSYCOPG"]
