"""Database-specific exception types for the project."""

from __future__ import annotations

import sqlite3


class DatabaseError(Exception):
    """Base exception for database-related errors."""


class ConnectionError(DatabaseError):  # noqa: A001
    """Raised when the connection cannot be opened, closed, or reused."""


class QueryError(DatabaseError):
    """Raised when a single statement fails.

    Attributes:
        statement: SQL text that failed.
        cause: Underlying driver exception.
    """

    def __init__(self, statement: str, cause: BaseException) -> None:
        super().__init__(f"{cause} (query: {_truncate(statement)})")
        self.statement = statement
        self.cause = cause

    @property
    def query(self) -> str:
        return self.statement


class IntegrityError(QueryError):
    """Raised when a constraint violation occurs."""


class BatchError(DatabaseError):
    """Raised when a transactional batch fails and has been rolled back.

    Attributes:
        table: Target table of the batch.
        cause: The exception that triggered the rollback.
        statement: SQL text of the failing step, if known.
        index: Position of the failing item in the batch, or None when the
            failure happened outside the insert loop (delete step, commit).
    """

    def __init__(
        self,
        table: str,
        cause: BaseException,
        *,
        statement: str | None = None,
        index: int | None = None,
    ) -> None:
        where = f"item {index}" if index is not None else "batch"
        super().__init__(f"Batch write to {table!r} rolled back at {where}: {cause}")
        self.table = table
        self.cause = cause
        self.statement = statement
        self.index = index


def _truncate(sql: str, limit: int = 80) -> str:
    flat = " ".join(sql.split())
    return flat if len(flat) <= limit else flat[: limit - 3] + "..."


def from_sqlite_error(error: sqlite3.Error | OverflowError, statement: str) -> QueryError:
    """Map a raw driver error to a project-level QueryError.

    IntegrityError is mapped to IntegrityError, all others to QueryError.
    OverflowError is what the driver raises for an integer parameter that
    does not fit in 64 bits.

    Args:
        error: SQLite or parameter-binding exception to convert.
        statement: SQL text that raised it.

    Returns:
        QueryError or IntegrityError carrying the statement and cause.
    """
    if isinstance(error, sqlite3.IntegrityError):
        return IntegrityError(statement, error)
    return QueryError(statement, error)
