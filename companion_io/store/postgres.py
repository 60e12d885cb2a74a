from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2.extras import Json

from companion_io.models.config_models import DatabaseConfig
from companion_io.models.entities import ENTITY_TYPES, EntityKind
from companion_io.models.serialization import from_document, to_document

from .base import StoreError

"""PostgreSQL-backed record store.

One table per entity kind, ``companion_<kind>(id text primary key, body jsonb)``.
Entities are stored as JSON documents (companion_io.models.serialization), so
adding a field never needs a migration.

Connection parameters are resolved in this order:
    1. DATABASE_URL / PGDSN environment variables (full DSN)
    2. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of the config file
"""

__all__ = [
    "PostgresStore",
    "resolve_dsn",
    "postgres_connection",
    "table_name",
]

logger = logging.getLogger(__name__)


def table_name(kind: EntityKind) -> str:
    return f"companion_{kind.value}"


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def postgres_connection(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a cursor inside one transaction; commit on success, roll back on error."""
    try:
        conn = psycopg2.connect(resolve_dsn(db_cfg))
    except psycopg2.Error as e:
        raise StoreError(f"database connection failed: {e}") from e
    conn.autocommit = False
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


class PostgresStore:
    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    def _execute(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        try:
            self._cursor.execute(sql, params)
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e

    def ensure_schema(self) -> None:
        for kind in EntityKind:
            self._execute(
                f"CREATE TABLE IF NOT EXISTS {table_name(kind)} "
                "(id text PRIMARY KEY, body jsonb NOT NULL)"
            )
        logger.debug("ensured %d record tables", len(EntityKind))

    def list(self, kind: EntityKind, sort_by: str | None = None) -> list[Any]:
        sql = f"SELECT body FROM {table_name(kind)}"
        params: tuple[Any, ...] | None = None
        if sort_by is not None:
            # ISO 文字列なので text 順 = 時系列順
            sql += " ORDER BY body->>%s NULLS LAST"
            params = (sort_by,)
        self._execute(sql, params)
        cls = ENTITY_TYPES[kind]
        return [from_document(cls, body) for (body,) in self._cursor.fetchall()]

    def get(self, kind: EntityKind, entity_id: str) -> Any | None:
        self._execute(f"SELECT body FROM {table_name(kind)} WHERE id = %s", (entity_id,))
        row = self._cursor.fetchone()
        return from_document(ENTITY_TYPES[kind], row[0]) if row else None

    def insert(self, kind: EntityKind, entity: Any) -> str:
        self._execute(
            f"INSERT INTO {table_name(kind)} (id, body) VALUES (%s, %s)",
            (entity.id, Json(to_document(entity))),
        )
        return entity.id

    def update(self, kind: EntityKind, entity_id: str, **changes: Any) -> None:
        current = self.get(kind, entity_id)
        if current is None:
            raise StoreError(f"no {kind.value} record with id {entity_id}")
        encoded = to_document(dataclasses.replace(current, **changes))
        patch = {k: encoded[k] for k in changes}
        self._execute(
            f"UPDATE {table_name(kind)} SET body = body || %s WHERE id = %s",
            (Json(patch), entity_id),
        )

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._execute(f"DELETE FROM {table_name(kind)} WHERE id = %s", (entity_id,))

    def count(self, kind: EntityKind, predicate: Callable[[Any], bool] | None = None) -> int:
        if predicate is not None:
            return sum(1 for e in self.list(kind) if predicate(e))
        self._execute(f"SELECT count(*) FROM {table_name(kind)}")
        row = self._cursor.fetchone()
        return int(row[0]) if row else 0
