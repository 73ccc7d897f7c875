"""Basic query execution helpers.

These wrap low-level aiosqlite operations with logging, connection
serialization and typed return shapes used by higher-level helpers.
Every call holds `Connection.exclusive()` for its whole duration.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

import aiosqlite

from .connection import Connection
from .errors import from_sqlite_error

logger = logging.getLogger(__name__)

Params = Sequence[Any] | Mapping[str, Any] | None


async def execute_query(
    db: aiosqlite.Connection,
    sql: str,
    params: Params = None,
) -> aiosqlite.Cursor:
    """Execute a SQL statement on an already-held handle and return the cursor.

    Low-level helper; callers must already hold the connection through
    `Connection.exclusive()`. `params=None` and an empty sequence are
    equivalent.

    Args:
        db: Live aiosqlite connection.
        sql: SQL statement.
        params: Positional (sequence) or named (mapping) parameters.

    Returns:
        Cursor positioned on the statement's results.

    Raises:
        QueryError: If execution fails (IntegrityError for constraint
            violations).

    Logs:
        - DEBUG: "Executed query: {sql[:80]}" on success.
    """
    try:
        cursor = await db.execute(sql, params or ())
    except (sqlite3.Error, OverflowError) as exc:
        raise from_sqlite_error(exc, sql) from exc
    logger.debug("Executed query: %s", sql[:80])
    return cursor


async def run_query(
    conn: Connection,
    sql: str,
    params: Params = None,
) -> list[dict[str, Any]]:
    """Execute a read statement and return all rows as dicts.

    Args:
        conn: Database connection.
        sql: SQL query string.
        params: Query parameters. Defaults to no substitution.

    Returns:
        List of dictionaries, one per row, with column names as keys, in
        the order the store returned them. Empty list if no rows match.

    Raises:
        QueryError: If query execution fails.
        ConnectionError: If the connection is closed.
    """
    async with conn.exclusive() as db:
        cursor = await execute_query(db, sql, params)
        try:
            rows = await cursor.fetchall()
        except sqlite3.Error as exc:
            raise from_sqlite_error(exc, sql) from exc
        finally:
            await cursor.close()
    return [dict(row) for row in rows]


async def run_insert(
    conn: Connection,
    sql: str,
    params: Params = None,
) -> int:
    """Execute an INSERT of one row and return its rowid.

    Args:
        conn: Database connection.
        sql: INSERT statement.
        params: Statement parameters. Defaults to no substitution.

    Returns:
        Store-assigned identifier (rowid) of the inserted row.

    Raises:
        QueryError: If statement execution fails.
        ConnectionError: If the connection is closed.

    Logs:
        - DEBUG: "Inserted row {rowid}" on success.
    """
    async with conn.exclusive() as db:
        cursor = await execute_query(db, sql, params)
        rowid = cursor.lastrowid
        await cursor.close()
    logger.debug("Inserted row %s", rowid)
    return rowid


async def run_update(
    conn: Connection,
    sql: str,
    params: Params = None,
) -> int:
    """Execute UPDATE/DELETE and return number of affected rows.

    Args:
        conn: Database connection.
        sql: SQL statement (UPDATE or DELETE).
        params: Statement parameters. Defaults to no substitution.

    Returns:
        Number of rows affected by the operation.

    Raises:
        QueryError: If statement execution fails.
        ConnectionError: If the connection is closed.

    Logs:
        - DEBUG: "Update affected {rowcount} rows" on success.
    """
    async with conn.exclusive() as db:
        cursor = await execute_query(db, sql, params)
        rowcount = cursor.rowcount
        await cursor.close()
    logger.debug("Update affected %s rows", rowcount)
    return rowcount
