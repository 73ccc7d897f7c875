"""Tests for the SQLiteModel base class."""

from __future__ import annotations

import sqlite3
from typing import Any

import pytest

from litebase.database import ConnectionError, SQLiteModel, Statement


class EventModel(SQLiteModel):
    async def find(self, event_id: int) -> dict[str, Any] | None:
        rows = await self.run_query("select id, name from events where id = ?", [event_id])
        return self.get_first(rows)

    async def add(self, name: str) -> int:
        return await self.run_insert("insert into events (name) values (?)", [name])

    async def rename_all(self, name: str) -> int:
        return await self.run_update("update events set name = ?", [name])

    async def replace_all(self, names: list[str], pacing_ms: float = 0) -> None:
        batch = [Statement("insert into events (name) values (?)", (n,)) for n in names]
        await self.many_insert("events", batch, True, pacing_ms)


@pytest.mark.asyncio
async def test_model_round_trip(events_table: sqlite3.Connection, conn) -> None:
    model = EventModel(conn)

    await model.ping()
    new_id = await model.add("fresh")
    assert await model.find(new_id) == {"id": new_id, "name": "fresh"}
    assert await model.find(999) is None
    assert await model.total("events") == 2
    assert await model.rename_all("same") == 2


@pytest.mark.asyncio
async def test_models_share_connection(events_table: sqlite3.Connection, conn) -> None:
    writer, reader = EventModel(conn), EventModel(conn)

    await writer.replace_all(["a", "b"])

    assert await reader.total("events") == 2
    await reader.set_case_sensitivity(False)
    assert len(await reader.run_query("select * from events where name like 'A'")) == 1


@pytest.mark.asyncio
async def test_end_closes_shared_connection(events_table: sqlite3.Connection, conn) -> None:
    first, second = EventModel(conn), EventModel(conn)

    await first.end()

    with pytest.raises(ConnectionError):
        await second.total("events")
