"""Small helpers built on the query executor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .connection import Connection
from .queries import run_query

T = TypeVar("T")


async def total(conn: Connection, table_name: str, option_clause: str = "") -> int:
    """Return the row count of table_name.

    option_clause (e.g. "where kind = 'note'") is appended verbatim and is
    not sanitized; callers must not pass untrusted input.
    """
    sql = f"select count(*) as total from {table_name} {option_clause}".rstrip()  # noqa: S608
    rows = await run_query(conn, sql)
    return int(rows[0]["total"])


def get_first(rows: Sequence[T]) -> T | None:
    """Return the first row, or None if rows is empty."""
    return rows[0] if rows else None


async def set_case_sensitivity(conn: Connection, enabled: bool) -> None:
    """Toggle case-sensitive LIKE matching for the whole connection.

    The pragma is connection-wide, so concurrent callers that rely on
    different settings race with each other.
    """
    await run_query(conn, f"pragma case_sensitive_like = {int(enabled)}")
