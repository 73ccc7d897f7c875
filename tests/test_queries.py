"""Tests for the query executor."""

from __future__ import annotations

import asyncio
import sqlite3

import pytest

from litebase.database import (
    Connection,
    IntegrityError,
    QueryError,
    Statement,
    many_insert,
    run_insert,
    run_query,
    run_update,
)


class TestRunQuery:
    @pytest.mark.asyncio
    async def test_returns_rows_as_dicts(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        rows = await run_query(conn, "select id, name from events")
        assert rows == [{"id": 0, "name": "stale"}]

    @pytest.mark.asyncio
    async def test_empty_result(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        assert await run_query(conn, "select * from events where id = ?", [42]) == []

    @pytest.mark.asyncio
    async def test_positional_params_in_order(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        events_table.execute("INSERT INTO events (id, name) VALUES (1, 'a'), (2, 'b')")
        rows = await run_query(conn, "select name from events where id between ? and ? order by id", (1, 2))
        assert [row["name"] for row in rows] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_named_params(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        rows = await run_query(conn, "select name from events where id = :id", {"id": 0})
        assert rows == [{"name": "stale"}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [None, (), []])
    async def test_missing_and_empty_params_are_equivalent(
        self, events_table: sqlite3.Connection, conn: Connection, params
    ) -> None:
        assert await run_query(conn, "select count(*) as n from events", params) == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_repeated_read_is_identical(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        events_table.execute("INSERT INTO events (id, name) VALUES (1, 'a'), (2, 'b')")
        sql = "select * from events where id >= ? order by id"
        assert await run_query(conn, sql, [0]) == await run_query(conn, sql, [0])

    @pytest.mark.asyncio
    async def test_error_carries_statement_and_cause(self, conn: Connection) -> None:
        with pytest.raises(QueryError) as exc:
            await run_query(conn, "select * from missing_table")
        assert exc.value.statement == "select * from missing_table"
        assert isinstance(exc.value.cause, sqlite3.OperationalError)
        assert isinstance(exc.value.__cause__, sqlite3.OperationalError)
        assert not isinstance(exc.value, IntegrityError)

    @pytest.mark.asyncio
    async def test_oversized_integer_param_raises_query_error(
        self, events_table: sqlite3.Connection, conn: Connection
    ) -> None:
        with pytest.raises(QueryError) as exc:
            await run_query(conn, "select * from events where id = ?", [2**70])
        assert isinstance(exc.value.cause, OverflowError)
        assert await run_query(conn, "select count(*) as n from events") == [{"n": 1}]


class TestRunInsert:
    @pytest.mark.asyncio
    async def test_returns_rowid(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        row_id = await run_insert(conn, "insert into events (name) values (?)", ["fresh"])
        assert row_id == 1
        assert events_table.execute("SELECT name FROM events WHERE id = ?", (row_id,)).fetchone() == ("fresh",)

    @pytest.mark.asyncio
    async def test_insert_without_params(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        row_id = await run_insert(conn, "insert into events (id, name) values (7, 'x')")
        assert row_id == 7

    @pytest.mark.asyncio
    async def test_constraint_violation(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        with pytest.raises(IntegrityError) as exc:
            await run_insert(conn, "insert into events (id, name) values (?, ?)", [0, "dup"])
        assert isinstance(exc.value.cause, sqlite3.IntegrityError)


class TestRunUpdate:
    @pytest.mark.asyncio
    async def test_returns_rowcount(self, events_table: sqlite3.Connection, conn: Connection) -> None:
        events_table.execute("INSERT INTO events (id, name) VALUES (1, 'a'), (2, 'b')")
        assert await run_update(conn, "update events set name = upper(name) where id > ?", [0]) == 2
        assert await run_update(conn, "delete from events where id = ?", [99]) == 0


class TestSerialization:
    @pytest.mark.asyncio
    async def test_query_never_sees_half_written_batch(
        self, events_table: sqlite3.Connection, conn: Connection
    ) -> None:
        batch = [
            Statement("insert into events (id, name) values (?, ?)", (i, f"n{i}"))
            for i in range(1, 4)
        ]

        _, rows = await asyncio.gather(
            many_insert(conn, "events", batch, True, pacing_ms=10),
            run_query(conn, "select count(*) as n from events"),
        )

        assert rows[0]["n"] in (1, 3)
