from __future__ import annotations

import sqlite3
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio

from litebase.database import Connection, open_connection


@pytest.fixture(autouse=True)
def app_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """
    Forces test mode and isolates settings from the developer's environment.
    Automatically applied to all tests.
    """
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.delenv("LITEBASE_DB_PATH", raising=False)
    monkeypatch.setenv("LITEBASE_CONFIG", str(tmp_path / "no-config.yaml"))


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    A dedicated temp root directory for each test.
    All filesystem writes in tests should be under this root (or tmp_path directly).
    """
    root = tmp_path / "proj"
    (root / "data" / "in").mkdir(parents=True)
    (root / "data" / "out").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def chdir_to_project_root(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically change working directory to project_root for all tests.
    This ensures relative-path operations go into the temp directory by default.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def sqlite_path(project_root: Path) -> Path:
    """
    On-disk SQLite DB under the temp project root (more realistic than :memory:).
    """
    return project_root / "data" / "out" / "test.sqlite"


@pytest.fixture
def db_conn(sqlite_path: Path, project_root: Path) -> Iterator[sqlite3.Connection]:
    """
    A plain sqlite3 connection used to seed and inspect the database
    independently of the async layer under test. Always closed after each test.

    Safety enforcement:
    - Path assertion: DB must be under project_root (prevents touching real DBs)
    - busy_timeout: helps avoid flaky "database is locked" errors
    """
    try:
        sqlite_path.resolve().relative_to(project_root.resolve())
    except ValueError:
        raise AssertionError(
            f"SQLite path {sqlite_path} is not under project_root {project_root}. "
            "This prevents accidental writes to real databases."
        )

    conn = sqlite3.connect(sqlite_path, isolation_level=None)
    try:
        conn.execute("PRAGMA busy_timeout = 2000;")
        yield conn
    finally:
        conn.close()


@pytest.fixture
def events_table(db_conn: sqlite3.Connection) -> sqlite3.Connection:
    """`events` table holding a single stale row {0, "stale"}."""
    db_conn.execute("CREATE TABLE events (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    db_conn.execute("INSERT INTO events (id, name) VALUES (0, 'stale')")
    return db_conn


@pytest_asyncio.fixture
async def conn(sqlite_path: Path) -> AsyncIterator[Connection]:
    """Initialized async connection, closed after the test."""
    connection = await open_connection(sqlite_path)
    try:
        yield connection
    finally:
        await connection.close()
