"""Transactional bulk writes.

`many_insert` replaces (or appends to) the contents of a table with an
ordered batch of parameterized statements inside one transaction. The
whole batch either commits or rolls back; a failed batch leaves the
table exactly as it was before the call.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import aiosqlite

from .connection import Connection
from .errors import BatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Statement:
    """A SQL statement with its positional parameters."""

    query: str
    values: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values or ()))

    @classmethod
    def coerce(cls, item: Statement | Mapping[str, Any]) -> Statement:
        """Return item as a Statement.

        Accepts a Statement or a mapping with a `query` key and an optional
        `values` sequence.

        Raises:
            TypeError: If item is neither.
        """
        if isinstance(item, Statement):
            return item
        if isinstance(item, Mapping) and "query" in item:
            return cls(item["query"], tuple(item.get("values") or ()))
        msg = f"Expected Statement or mapping with 'query', got {type(item).__name__}"
        raise TypeError(msg)


async def _run(db: aiosqlite.Connection, sql: str, params: Sequence[Any] = ()) -> None:
    cursor = await db.execute(sql, params)
    await cursor.close()


async def _rollback(db: aiosqlite.Connection, table: str) -> None:
    try:
        await _run(db, "rollback")
    except (sqlite3.Error, ValueError):
        # ValueError: the driver has no active connection
        logger.exception("Rollback of batch write to %s failed", table)
    else:
        logger.debug("Batch write to %s rolled back", table)


async def many_insert(
    conn: Connection,
    target_table: str,
    batch: Iterable[Statement | Mapping[str, Any]],
    should_delete_first: bool,
    pacing_ms: float = 0,
) -> None:
    """Run a batch of write statements atomically.

    Items execute strictly in order, each awaited before the next starts,
    so later items may depend on rows written by earlier ones. The
    connection is held exclusively for the whole call.

    Args:
        conn: Database connection.
        target_table: Table the batch writes to. Used verbatim in the
            delete step; callers must pass a trusted identifier.
        batch: Ordered statements (Statement objects or mappings with
            `query` and `values`).
        should_delete_first: If True, delete all rows of target_table as
            the first effect inside the transaction.
        pacing_ms: Milliseconds to sleep after each item. 0 disables pacing.

    Raises:
        ValueError: If pacing_ms is negative.
        TypeError: If a batch item cannot be interpreted as a Statement.
        BatchError: If the delete step, any item, or the commit fails. The
            transaction has been rolled back and `cause` holds the
            triggering driver exception.
        ConnectionError: If the connection is closed.

    Logs:
        - DEBUG: "Beginning batch write to {table}" at start.
        - INFO: "Committed {n} statement(s) to {table}" on success.
        - ERROR: "Batch write to {table} failed, rolling back" on failure.
        - ERROR: "Rollback of batch write to {table} failed" if the
            rollback itself fails (the original error is still raised).

    Side Effects:
        - Deletes rows of target_table when should_delete_first is True.
        - Executes every statement in batch.
    """
    if pacing_ms < 0:
        msg = f"pacing_ms must be >= 0, got {pacing_ms}"
        raise ValueError(msg)
    statements: Sequence[Statement] = [Statement.coerce(item) for item in batch]
    delay = pacing_ms / 1000

    async with conn.exclusive() as db:
        logger.debug("Beginning batch write to %s", target_table)
        try:
            await _run(db, "begin transaction")
        except sqlite3.Error as exc:
            raise BatchError(target_table, exc, statement="begin transaction") from exc

        index: int | None = None
        current: str | None = None
        try:
            if should_delete_first:
                current = f"delete from {target_table}"
                await _run(db, current)

            for index, statement in enumerate(statements):
                current = statement.query
                await _run(db, statement.query, statement.values)
                if delay > 0:
                    await asyncio.sleep(delay)

            index, current = None, "commit"
            await _run(db, "commit")
        except (sqlite3.Error, OverflowError) as exc:
            logger.exception("Batch write to %s failed, rolling back", target_table)
            await _rollback(db, target_table)
            raise BatchError(target_table, exc, statement=current, index=index) from exc
        except asyncio.CancelledError:
            await _rollback(db, target_table)
            raise

    logger.info("Committed %d statement(s) to %s", len(statements), target_table)
