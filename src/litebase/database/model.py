"""Base class for data-access models.

Concrete models subclass `SQLiteModel`, receive the shared `Connection`
in their constructor and call the protected-style helpers below instead
of touching aiosqlite directly.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from . import batch, helpers, queries
from .connection import Connection

T = TypeVar("T")


class SQLiteModel:
    """Thin facade over the database helpers bound to one connection."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    async def ping(self) -> None:
        await self.connection.ping()

    async def end(self) -> None:
        """Close the shared connection. Other models using it stop working."""
        await self.connection.close()

    async def run_query(self, sql: str, params: queries.Params = None) -> list[dict[str, Any]]:
        return await queries.run_query(self.connection, sql, params)

    async def run_insert(self, sql: str, params: queries.Params = None) -> int:
        return await queries.run_insert(self.connection, sql, params)

    async def run_update(self, sql: str, params: queries.Params = None) -> int:
        return await queries.run_update(self.connection, sql, params)

    async def many_insert(
        self,
        target_table: str,
        items: Iterable[batch.Statement | Mapping[str, Any]],
        should_delete_first: bool,
        pacing_ms: float = 0,
    ) -> None:
        await batch.many_insert(
            self.connection,
            target_table,
            items,
            should_delete_first,
            pacing_ms=pacing_ms,
        )

    async def total(self, table_name: str, option_clause: str = "") -> int:
        return await helpers.total(self.connection, table_name, option_clause)

    @staticmethod
    def get_first(rows: Sequence[T]) -> T | None:
        return helpers.get_first(rows)

    async def set_case_sensitivity(self, enabled: bool) -> None:
        await helpers.set_case_sensitivity(self.connection, enabled)
