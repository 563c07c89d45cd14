"""Async database manager.

Thin wrapper around a SQLAlchemy asyncio engine exposing the two operations
the indexer needs: reads, and conflict-ignoring batch inserts. PostgreSQL
(asyncpg) is the production target; SQLite (aiosqlite) is used for local
runs and tests.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import bittensor as bt
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .schema.base import Base

# Upper bound on bind parameters per statement, by dialect.
_MAX_BIND_PARAMS: dict[str, int] = {
    "postgresql": 65535,
    "sqlite": 999,
}


def _insert_for(dialect: str):
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise ValueError(f"unsupported database dialect: {dialect}")
    return insert


class DBM:
    """Owns the engine and runs statements in short transactions."""

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)

    @classmethod
    def get_manager(cls, config: Any) -> DBM:
        """Build a manager from any config object exposing ``database_url``."""
        return cls(config.database_url)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    async def read(
        self,
        stmt: Any,
        params: Mapping[str, Any] | None = None,
        mappings: bool = False,
    ) -> list[Any]:
        """Execute a read and return all rows (as mappings if requested)."""
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt, dict(params or {}))
            if mappings:
                return [dict(row) for row in result.mappings().all()]
            return list(result.all())

    async def insert_ignore(self, table: Table, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert rows in one transaction, skipping primary key conflicts.

        Large batches are split into several multi-row statements so that no
        statement exceeds the dialect's bind parameter limit. Returns the
        number of rows actually inserted.
        """
        if not rows:
            return 0

        insert = _insert_for(self.dialect)
        width = max(len(table.columns), 1)
        chunk_size = max(_MAX_BIND_PARAMS[self.dialect] // width, 1)

        inserted = 0
        async with self.engine.begin() as conn:
            for start in range(0, len(rows), chunk_size):
                chunk = [dict(r) for r in rows[start:start + chunk_size]]
                stmt = insert(table).values(chunk).on_conflict_do_nothing()
                result = await conn.execute(stmt)
                inserted += max(result.rowcount, 0)
        return inserted

    async def create_schema(self) -> None:
        """Create all tables that do not exist yet (local runs and tests)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        bt.logging.info({"dbm": {"schema": "created", "dialect": self.dialect}})

    async def dispose(self) -> None:
        await self.engine.dispose()


__all__ = ["DBM"]
