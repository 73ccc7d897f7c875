"""CLI commands for ad-hoc database access."""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from ..base import BaseCLI
from ...database import (
    Connection,
    Statement,
    many_insert,
    open_connection,
    run_insert,
    run_query,
    total,
)

T = TypeVar("T")

db_app = typer.Typer(help="Database access commands.")

DbPathOption = Annotated[
    Path | None,
    typer.Option(
        "--db-path",
        help="Path to SQLite database file (defaults to config, then data/database.db)",
    ),
]
ParamOption = Annotated[
    list[str] | None,
    typer.Option(
        "-p",
        "--param",
        help="Positional parameter; JSON literals (1, 2.5, null, true) are decoded",
    ),
]


def _parse_param(raw: str) -> Any:
    """Decode a CLI parameter as a JSON scalar, falling back to the raw string."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if isinstance(value, (dict, list)):
        return raw
    return value


def _validate_identifier(name: str) -> None:
    """Validate SQL identifier to prevent injection.

    Args:
        name: SQL identifier (table or column name) to validate.

    Raises:
        ValueError: If identifier contains unsafe characters.
    """
    if not name.replace("_", "").isalnum():
        msg = f"Unsafe SQL identifier: {name!r}"
        raise ValueError(msg)


def _read_rows(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array of row objects from path.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a JSON array of objects.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rows file not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        msg = f"{path} must contain a JSON array of objects"
        raise ValueError(msg)
    return data


def build_insert_statements(table: str, rows: list[dict[str, Any]]) -> list[Statement]:
    """Build one INSERT statement per row, columns in each row's key order."""
    _validate_identifier(table)
    statements = []
    for row in rows:
        for col in row:
            _validate_identifier(col)
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        sql = f"insert into {table} ({columns}) values ({placeholders})"  # noqa: S608
        statements.append(Statement(sql, tuple(row.values())))
    return statements


def _with_connection(db_path: Path | None, work: Callable[[Connection], Awaitable[T]]) -> T:
    """Open a connection, run work on it, and always close it."""

    async def _run() -> T:
        conn = await open_connection(db_path)
        try:
            return await work(conn)
        finally:
            await conn.close()

    return asyncio.run(_run())


def _render_rows(rows: list[dict[str, Any]]) -> None:
    if not rows:
        typer.echo("(no rows)")
        return
    table = Table(show_header=True, header_style="bold")
    for column in rows[0]:
        table.add_column(str(column))
    for row in rows:
        table.add_row(*("NULL" if value is None else str(value) for value in row.values()))
    Console().print(table)


class DatabaseCLI(BaseCLI):
    """CLI helpers for database access."""

    def __init__(self) -> None:
        """Initialize DatabaseCLI with db domain name."""
        super().__init__("db")

    def ping_db(self, *, db_path: Path | None) -> dict[str, Any]:
        """Open the database, ping it, and close it again."""

        async def _ping(conn: Connection) -> dict[str, Any]:
            await conn.ping()
            return {"success": True, "message": f"Database reachable at {conn.path}"}

        return self.handle_cli_operation(
            operation="db ping",
            op_callable=lambda: _with_connection(db_path, _ping),
        )

    def query_db(self, *, sql: str, params: list[Any], db_path: Path | None) -> list[dict[str, Any]]:
        """Run a read statement and render its rows as a table."""
        rows = self.handle_cli_operation(
            operation="db query",
            op_callable=lambda: _with_connection(db_path, lambda conn: run_query(conn, sql, params)),
            echo_result=False,
        )
        _render_rows(rows)
        return rows

    def insert_db(self, *, sql: str, params: list[Any], db_path: Path | None) -> dict[str, Any]:
        """Run a single-row insert and report the new row id."""

        async def _insert(conn: Connection) -> dict[str, Any]:
            row_id = await run_insert(conn, sql, params)
            return {"success": True, "row_id": row_id}

        return self.handle_cli_operation(
            operation="db insert",
            op_callable=lambda: _with_connection(db_path, _insert),
        )

    def total_db(self, *, table: str, where: str | None, db_path: Path | None) -> dict[str, Any]:
        """Count rows in a table, optionally filtered by a WHERE clause."""
        option = f"where {where}" if where else ""

        async def _total(conn: Connection) -> dict[str, Any]:
            return {"success": True, "total": await total(conn, table, option)}

        return self.handle_cli_operation(
            operation="db total",
            op_callable=lambda: _with_connection(db_path, _total),
        )

    def load_db(
        self,
        *,
        table: str,
        rows_file: Path,
        delete_first: bool,
        pacing_ms: float,
        db_path: Path | None,
    ) -> dict[str, Any]:
        """Load rows from a JSON file into a table in one transaction.

        Args:
            table: Target table.
            rows_file: JSON array of row objects.
            delete_first: Delete all existing rows inside the same transaction.
            pacing_ms: Delay after each inserted row.
            db_path: Path to SQLite database.

        Returns:
            Standardized load result dictionary.

        User Output:
            - "Loading {n} row(s) into {table}..." pre-message.
            - Formatted result via BaseCLI.handle_cli_operation.
        """

        async def _load(conn: Connection) -> dict[str, Any]:
            statements = build_insert_statements(table, _read_rows(rows_file))
            started = time.perf_counter()
            await many_insert(conn, table, statements, delete_first, pacing_ms=pacing_ms)
            return {
                "success": True,
                "inserted": len(statements),
                "elapsed_s": time.perf_counter() - started,
                "message": "existing rows replaced" if delete_first else None,
            }

        return self.handle_cli_operation(
            operation="db load",
            op_callable=lambda: _with_connection(db_path, _load),
            pre_message=f"Loading rows from {rows_file} into {table}...",
        )


cli = DatabaseCLI()


@db_app.command("ping")
def ping_command(db_path: DbPathOption = None) -> None:
    """Check that the database can be opened."""
    cli.ping_db(db_path=db_path)


@db_app.command("query")
def query_command(
    sql: Annotated[str, typer.Argument(help="SQL statement to run")],
    params: ParamOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Run a read statement and print the resulting rows."""
    cli.query_db(sql=sql, params=[_parse_param(p) for p in params or []], db_path=db_path)


@db_app.command("insert")
def insert_command(
    sql: Annotated[str, typer.Argument(help="INSERT statement to run")],
    params: ParamOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Insert one row and print its row id."""
    cli.insert_db(sql=sql, params=[_parse_param(p) for p in params or []], db_path=db_path)


@db_app.command("total")
def total_command(
    table: Annotated[str, typer.Argument(help="Table to count")],
    where: Annotated[
        str | None,
        typer.Option("--where", help="Filter appended as a WHERE clause (trusted input)"),
    ] = None,
    db_path: DbPathOption = None,
) -> None:
    """Print the number of rows in a table."""
    cli.total_db(table=table, where=where, db_path=db_path)


@db_app.command("load")
def load_command(
    table: Annotated[str, typer.Argument(help="Target table")],
    rows_file: Annotated[Path, typer.Argument(help="JSON file containing an array of row objects")],
    delete_first: Annotated[
        bool,
        typer.Option("--delete-first", help="Delete existing rows in the same transaction"),
    ] = False,
    pacing_ms: Annotated[
        float,
        typer.Option("--pacing-ms", min=0, help="Delay in milliseconds after each row"),
    ] = 0,
    db_path: DbPathOption = None,
) -> None:
    """Load rows from a JSON file into a table atomically.

    Either every row is written or, on any failure, the table is left
    exactly as it was (including rows removed by --delete-first).
    Exits with code 1 on failure.
    """
    cli.load_db(
        table=table,
        rows_file=rows_file,
        delete_first=delete_first,
        pacing_ms=pacing_ms,
        db_path=db_path,
    )


app = db_app
