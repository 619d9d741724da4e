# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Table gateway for Vendor Desk.

This module is the leaf dependency of the application: every other layer
reads and writes data exclusively through the generic, table-based helpers
defined here. It is responsible for:

- Initializing the SQLite schema (idempotent).
- Listing the rows of a table, or of every table at once.
- Inserting, updating and deleting single rows by id.
- Deleting every row matching a column value (used by ledger cascades).
- Grouping several writes into a single atomic transaction.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

One table per entity. Every table has an ``id INTEGER PRIMARY KEY
AUTOINCREMENT`` column. Dates and timestamps are stored as ISO-8601 text.
Money is stored as signed integer cents in ``*_cents`` columns; conversion
to monetary units is done by the row mappers in ``models.py``.

- clients                   customers of the vendor
- client_software_licenses  licenses sold to a client
- client_monthly_fees       recurring billing lines of a client
- occurrences               support tickets
- financial_entries         revenue / expense ledger
- softwares, services       sellable catalog
- expense_categories        ledger categories for expenses
- suppliers                 expense counterparts
- profiles                  application users and roles
- company_info              single-row company identity

``financial_entries.license_id`` references the license whose sale posted
the entry. The reconciliation rules in ``ledger.py`` keep exactly one such
entry per non-returned license.

------------------------------------------------------------------------------
Connections and transactions
------------------------------------------------------------------------------

Every public helper accepts an optional ``conn`` keyword argument:

- without ``conn``, the helper opens its own connection, commits on success
  and closes it (one operation = one transaction);
- with ``conn`` (obtained from ``transaction()``), the helper only executes
  its statements; the enclosing ``transaction()`` block commits everything
  at once, or rolls everything back when any step fails.

``sqlite3.Error`` is translated into ``GatewayError`` at the transaction
boundary so that callers only deal with the application error taxonomy.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import GatewayError

logger = logging.getLogger(__name__)

_SCHEMA_READY: set[Path] = set()
"""Database files whose schema was created by this process."""


# ---------------------------------------------------------------------------
# Dataclasses and table definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for Vendor Desk.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "clients": (
        "id",
        "name",
        "cnpj",
        "contact_name",
        "email",
        "whatsapp",
        "address",
        "active",
        "created_at",
    ),
    "client_software_licenses": (
        "id",
        "client_id",
        "software_id",
        "software_name",
        "type",
        "acquisition_date",
        "price_cents",
        "returned",
    ),
    "client_monthly_fees": (
        "id",
        "client_id",
        "description",
        "value_cents",
        "due_date",
        "active",
    ),
    "occurrences": (
        "id",
        "client_id",
        "client_name",
        "solicitor",
        "title",
        "description",
        "status",
        "opening_date",
        "deadline",
        "closing_date",
        "closed_by",
    ),
    "financial_entries": (
        "id",
        "type",
        "description",
        "category",
        "value_cents",
        "date",
        "due_date",
        "client_id",
        "client_name",
        "supplier_id",
        "supplier_name",
        "payment_method",
        "observation",
        "license_id",
    ),
    "softwares": (
        "id",
        "name",
        "version",
        "price_unitary_cents",
        "price_network_cents",
        "price_cloud_cents",
        "update_price_cents",
        "cloud_update_price_cents",
        "monthly_fee_cents",
    ),
    "services": (
        "id",
        "name",
        "description",
        "price_client_cents",
        "price_non_client_cents",
    ),
    "expense_categories": ("id", "name"),
    "suppliers": ("id", "name", "contact", "phone", "email"),
    "profiles": ("id", "name", "email", "role", "active", "avatar"),
    "company_info": ("id", "name", "cnpj", "address", "phone", "email", "logo_url"),
}
"""Known tables and their columns, in schema order."""


_SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS clients (
        id            INTEGER PRIMARY KEY AUTOINCREMENT,
        name          TEXT    NOT NULL,
        cnpj          TEXT,
        contact_name  TEXT,
        email         TEXT,
        whatsapp      TEXT,
        address       TEXT,
        active        INTEGER NOT NULL DEFAULT 1,
        created_at    TEXT    NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS softwares (
        id                        INTEGER PRIMARY KEY AUTOINCREMENT,
        name                      TEXT    NOT NULL,
        version                   TEXT,
        price_unitary_cents       INTEGER NOT NULL DEFAULT 0,
        price_network_cents       INTEGER NOT NULL DEFAULT 0,
        price_cloud_cents         INTEGER NOT NULL DEFAULT 0,
        update_price_cents        INTEGER NOT NULL DEFAULT 0,
        cloud_update_price_cents  INTEGER NOT NULL DEFAULT 0,
        monthly_fee_cents         INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS client_software_licenses (
        id                INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id         INTEGER NOT NULL,
        software_id       INTEGER,
        software_name     TEXT    NOT NULL,
        type              TEXT    NOT NULL,  -- Unitary | Network | Cloud | Web
        acquisition_date  TEXT,
        price_cents       INTEGER NOT NULL DEFAULT 0,
        returned          INTEGER NOT NULL DEFAULT 0,

        FOREIGN KEY (client_id) REFERENCES clients(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS client_monthly_fees (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id    INTEGER NOT NULL,
        description  TEXT    NOT NULL,
        value_cents  INTEGER NOT NULL DEFAULT 0,
        due_date     TEXT,
        active       INTEGER NOT NULL DEFAULT 1,

        FOREIGN KEY (client_id) REFERENCES clients(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS occurrences (
        id            INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id     INTEGER NOT NULL,
        client_name   TEXT,
        solicitor     TEXT,
        title         TEXT    NOT NULL,
        description   TEXT,
        status        TEXT    NOT NULL DEFAULT 'open',
        opening_date  TEXT    NOT NULL,
        deadline      TEXT,
        closing_date  TEXT,
        closed_by     INTEGER,

        FOREIGN KEY (client_id) REFERENCES clients(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS financial_entries (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        type            TEXT    NOT NULL,  -- revenue | expense
        description     TEXT,
        category        TEXT,
        value_cents     INTEGER NOT NULL DEFAULT 0,
        date            TEXT,
        due_date        TEXT,
        client_id       INTEGER,
        client_name     TEXT,
        supplier_id     INTEGER,
        supplier_name   TEXT,
        payment_method  TEXT,
        observation     TEXT,
        license_id      INTEGER,

        FOREIGN KEY (client_id) REFERENCES clients(id),
        FOREIGN KEY (license_id) REFERENCES client_software_licenses(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS services (
        id                      INTEGER PRIMARY KEY AUTOINCREMENT,
        name                    TEXT    NOT NULL,
        description             TEXT,
        price_client_cents      INTEGER NOT NULL DEFAULT 0,
        price_non_client_cents  INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS expense_categories (
        id    INTEGER PRIMARY KEY AUTOINCREMENT,
        name  TEXT    NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS suppliers (
        id       INTEGER PRIMARY KEY AUTOINCREMENT,
        name     TEXT    NOT NULL,
        contact  TEXT,
        phone    TEXT,
        email    TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id      INTEGER PRIMARY KEY AUTOINCREMENT,
        name    TEXT    NOT NULL,
        email   TEXT    NOT NULL UNIQUE,
        role    TEXT    NOT NULL DEFAULT 'user',  -- admin | user
        active  INTEGER NOT NULL DEFAULT 1,
        avatar  TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS company_info (
        id        INTEGER PRIMARY KEY AUTOINCREMENT,
        name      TEXT    NOT NULL,
        cnpj      TEXT,
        address   TEXT,
        phone     TEXT,
        email     TEXT,
        logo_url  TEXT
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_financial_entries_license
        ON financial_entries(license_id);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_financial_entries_date
        ON financial_entries(date);
    """,
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection with foreign keys enabled.

    Rows are returned as ``sqlite3.Row`` so they can be turned into plain
    dictionaries. The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    conn = sqlite3.connect(cfg.path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist yet."""
    for statement in _SCHEMA_STATEMENTS:
        conn.execute(statement)
    conn.commit()


def _check_table(table: str) -> tuple[str, ...]:
    """Return the columns of a known table, raising for unknown tables."""
    try:
        return TABLE_COLUMNS[table]
    except KeyError as exc:
        raise ValueError(f"Unknown table: {table!r}") from exc


def _check_columns(table: str, columns: list[str]) -> list[str]:
    """
    Validate column names against the table definition.

    Column names are interpolated into SQL statements, so anything that is
    not part of the known schema is rejected.
    """
    known = _check_table(table)
    names = list(columns)
    unknown = [c for c in names if c not in known or c == "id"]
    if unknown:
        cols = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown or read-only column(s) for {table}: {cols}")
    return names


@contextmanager
def _use_connection(
    cfg: DatabaseConfig,
    conn: sqlite3.Connection | None,
) -> Iterator[sqlite3.Connection]:
    """Reuse the caller's transaction connection, or open a one-shot one."""
    if conn is not None:
        yield conn
        return

    with transaction(cfg) as own_conn:
        yield own_conn


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates every table and index if missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    GatewayError
        If schema creation fails.
    """
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    except sqlite3.Error as exc:
        raise GatewayError(f"Could not initialize database {cfg.path}") from exc
    finally:
        conn.close()
    _SCHEMA_READY.add(cfg.path)


@contextmanager
def transaction(cfg: DatabaseConfig) -> Iterator[sqlite3.Connection]:
    """
    Run several gateway operations as one atomic unit.

    Usage::

        with transaction(cfg) as conn:
            license_row = insert_row(cfg, "client_software_licenses", row, conn=conn)
            insert_row(cfg, "financial_entries", entry_row, conn=conn)

    The connection is committed when the block exits normally. Any exception
    rolls back every statement executed inside the block; ``sqlite3.Error``
    and ``OverflowError`` (integers SQLite cannot store) are re-raised as
    ``GatewayError``, other exceptions propagate unchanged.

    The schema is created on the first connection to a database file.
    """
    if cfg.path not in _SCHEMA_READY:
        init_database(cfg)

    conn = _connect(cfg)
    try:
        yield conn
        conn.commit()
    except (sqlite3.Error, OverflowError) as exc:
        conn.rollback()
        logger.warning("Transaction rolled back: %s", exc)
        raise GatewayError(str(exc)) from exc
    except BaseException:
        conn.rollback()
        logger.warning("Transaction rolled back after an application error.")
        raise
    finally:
        conn.close()


def list_rows(
    cfg: DatabaseConfig,
    table: str,
    *,
    conn: sqlite3.Connection | None = None,
) -> list[dict[str, Any]]:
    """Return every row of ``table`` as dictionaries, ordered by id."""
    _check_table(table)

    with _use_connection(cfg, conn) as c:
        rows = c.execute(f"SELECT * FROM {table} ORDER BY id;").fetchall()

    return [dict(row) for row in rows]


def get_row(
    cfg: DatabaseConfig,
    table: str,
    row_id: int,
    *,
    conn: sqlite3.Connection | None = None,
) -> dict[str, Any] | None:
    """Return a single row by id, or None if it does not exist."""
    _check_table(table)

    with _use_connection(cfg, conn) as c:
        row = c.execute(f"SELECT * FROM {table} WHERE id = ?;", (row_id,)).fetchone()

    return dict(row) if row is not None else None


def insert_row(
    cfg: DatabaseConfig,
    table: str,
    row: Mapping[str, Any],
    *,
    conn: sqlite3.Connection | None = None,
) -> dict[str, Any]:
    """
    Insert a new row and return it as stored (including its new id).

    Parameters
    ----------
    cfg:
        Database configuration.
    table:
        Target table name (see TABLE_COLUMNS).
    row:
        Column values. The ``id`` column is assigned by the database and
        must not be provided.

    Raises
    ------
    ValueError
        If the table or a column is unknown.
    GatewayError
        If the database rejects the insert.
    """
    columns = _check_columns(table, list(row.keys()))
    if not columns:
        raise ValueError(f"No values to insert into {table}.")

    placeholders = ", ".join("?" for _ in columns)
    params = [row[c] for c in columns]

    with _use_connection(cfg, conn) as c:
        cur = c.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders});",
            params,
        )
        new_id = cur.lastrowid
        stored = get_row(cfg, table, new_id, conn=c)

    if stored is None:
        msg = f"Row #{new_id} was just inserted into {table} but could not be reloaded."
        raise GatewayError(msg)

    logger.debug("Inserted %s #%s", table, new_id)
    return stored


def update_row(
    cfg: DatabaseConfig,
    table: str,
    row_id: int,
    patch: Mapping[str, Any],
    *,
    conn: sqlite3.Connection | None = None,
) -> dict[str, Any]:
    """
    Apply a partial update to an existing row and return the updated row.

    Every key present in ``patch`` is written, including falsy values such
    as 0, False or an empty string. Callers decide which fields to include.

    Raises
    ------
    ValueError
        If the patch is empty or references unknown columns.
    GatewayError
        If the row does not exist or the database rejects the update.
    """
    columns = _check_columns(table, list(patch.keys()))
    if not columns:
        raise ValueError(f"No fields to update in {table}.")

    assignments = ", ".join(f"{c} = ?" for c in columns)
    params = [patch[c] for c in columns]
    params.append(row_id)

    with _use_connection(cfg, conn) as c:
        cur = c.execute(f"UPDATE {table} SET {assignments} WHERE id = ?;", params)
        if cur.rowcount == 0:
            raise GatewayError(f"{table} #{row_id} not found.")
        stored = get_row(cfg, table, row_id, conn=c)

    logger.debug("Updated %s #%s (%s)", table, row_id, ", ".join(columns))
    return stored


def delete_row(
    cfg: DatabaseConfig,
    table: str,
    row_id: int,
    *,
    conn: sqlite3.Connection | None = None,
) -> None:
    """
    Permanently delete a row by id.

    Raises
    ------
    GatewayError
        If the row does not exist or is still referenced by another table.
    """
    _check_table(table)

    with _use_connection(cfg, conn) as c:
        cur = c.execute(f"DELETE FROM {table} WHERE id = ?;", (row_id,))
        if cur.rowcount == 0:
            raise GatewayError(f"{table} #{row_id} not found.")

    logger.debug("Deleted %s #%s", table, row_id)


def delete_where(
    cfg: DatabaseConfig,
    table: str,
    column: str,
    value: Any,
    *,
    conn: sqlite3.Connection | None = None,
) -> int:
    """
    Delete every row of ``table`` whose ``column`` equals ``value``.

    Returns
    -------
    int
        Number of deleted rows (0 is not an error).
    """
    _check_columns(table, [column])

    with _use_connection(cfg, conn) as c:
        cur = c.execute(f"DELETE FROM {table} WHERE {column} = ?;", (value,))
        deleted = cur.rowcount

    logger.debug("Deleted %d row(s) from %s where %s = %r", deleted, table, column, value)
    return deleted


def fetch_all(cfg: DatabaseConfig) -> dict[str, list[dict[str, Any]]]:
    """
    Load every table in a single read transaction.

    Returns
    -------
    dict[str, list[dict]]
        Rows of each table keyed by table name, every table of
        TABLE_COLUMNS being present (possibly with an empty list).
    """
    with transaction(cfg) as conn:
        return {table: list_rows(cfg, table, conn=conn) for table in TABLE_COLUMNS}


def has_rows(cfg: DatabaseConfig, table: str) -> bool:
    """
    Return True if ``table`` contains at least one row.

    Useful to warn the user when a report is requested on an empty database.
    """
    _check_table(table)

    with transaction(cfg) as conn:
        return conn.execute(f"SELECT 1 FROM {table} LIMIT 1;").fetchone() is not None
