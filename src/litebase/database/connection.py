"""Database connection handle.

This module owns the single asyncio SQLite connection used by the rest
of the package. The handle is opened lazily, serializes every operation
through `Connection.exclusive()`, and is never reopened once closed.
Callers construct one `Connection` (normally via `open_connection`) and
pass it to every component that needs database access.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
from collections.abc import AsyncIterator
from pathlib import Path
from types import TracebackType

import aiosqlite

from ..config import resolve_db_path
from .errors import ConnectionError

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def _ensure_parent_dir(db_path: Path) -> None:
    """Ensure the parent directory for a database file exists.

    Args:
        db_path: Path to database file whose parent directory should exist.

    Side Effects:
        - Creates parent directory if it doesn't exist (with parents=True).
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)


class Connection:
    """Lazily opened, explicitly closed handle to one SQLite database.

    The underlying `aiosqlite.Connection` runs in autocommit mode
    (`isolation_level=None`); transactions are started explicitly by the
    batch writer.
    """

    def __init__(self, db_path: Path | str | None = None) -> None:
        self._path = resolve_db_path(db_path)
        self._db: aiosqlite.Connection | None = None
        self._closed = False
        self._lock = asyncio.Lock()
        self._open_lock = asyncio.Lock()
        self.foreign_keys_enabled = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("open" if self._db else "idle")
        return f"<Connection {self._path} ({state})>"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._db is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def acquire(self) -> aiosqlite.Connection:
        """Return the live handle, opening it on first use.

        Returns:
            The shared aiosqlite connection.

        Raises:
            ConnectionError: If the connection was closed, or opening fails.

        Logs:
            - DEBUG: "Opening SQLite database at {path}" on first call.
        """
        if self._closed:
            msg = f"Connection to {self._path} is closed"
            raise ConnectionError(msg)
        if self._db is not None:
            return self._db

        async with self._open_lock:
            # another caller may have opened or closed it while we waited
            if self._closed:
                msg = f"Connection to {self._path} is closed"
                raise ConnectionError(msg)
            if self._db is not None:
                return self._db

            target = str(self._path)
            if target != MEMORY_DB:
                _ensure_parent_dir(self._path)
            logger.debug("Opening SQLite database at %s", self._path)
            try:
                db = await aiosqlite.connect(target, isolation_level=None)
            except (sqlite3.Error, OSError) as exc:
                msg = f"Failed to open database at {self._path}: {exc}"
                raise ConnectionError(msg) from exc
            db.row_factory = aiosqlite.Row
            self._db = db
            return db

    async def close(self) -> None:
        """Close the handle. Later calls to acquire() raise ConnectionError.

        Waits for the operation currently holding exclusive() to finish;
        operations still queued behind it fail with ConnectionError.

        Raises:
            ConnectionError: If the driver fails to close the connection.

        Logs:
            - DEBUG: "Connection closed" on success.
        """
        if self._closed:
            return
        self._closed = True
        async with self._lock, self._open_lock:
            db, self._db = self._db, None
            if db is None:
                return
            try:
                await db.close()
            except (sqlite3.Error, ValueError) as exc:
                msg = f"Failed to close database at {self._path}: {exc}"
                raise ConnectionError(msg) from exc
        logger.debug("Connection closed")

    async def ping(self) -> None:
        """No-op liveness probe; an embedded store has nothing to round-trip."""

    async def enable_foreign_keys(self) -> None:
        """Turn on foreign-key enforcement once for this connection."""
        if self.foreign_keys_enabled:
            return
        async with self.exclusive() as db:
            cursor = await db.execute("pragma foreign_keys = ON")
            await cursor.close()
        self.foreign_keys_enabled = True
        logger.debug("Foreign key enforcement enabled")

    @contextlib.asynccontextmanager
    async def exclusive(self) -> AsyncIterator[aiosqlite.Connection]:
        """Hold the connection for the duration of the block.

        Not re-entrant: nesting exclusive() on the same connection deadlocks.

        Yields:
            The live aiosqlite connection.

        Raises:
            ConnectionError: If the connection is closed or cannot be opened.
        """
        async with self._lock:
            yield await self.acquire()

    async def __aenter__(self) -> Connection:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


async def open_connection(db_path: Path | str | None = None) -> Connection:
    """Return a ready-to-use connection with foreign keys enforced.

    This is the single initialization step for the database layer: the
    caller that opens the connection owns it and is responsible for
    closing it.

    Args:
        db_path: Path to SQLite database file. Defaults to the configured
            path, then global_config.DEFAULT_DB_PATH.

    Returns:
        Open Connection with `pragma foreign_keys = ON` applied.

    Raises:
        ConnectionError: If the database cannot be opened.
    """
    conn = Connection(db_path)
    await conn.acquire()
    await conn.enable_foreign_keys()
    return conn
