"""Pipeline protocols - pluggable checkpoint sources, handlers and stores.

Sources: FilesystemCheckpointSource, HTTPCheckpointSource.
Handlers: CoinBalanceBuckets.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from coin_indexer.types.objects import CheckpointData


@runtime_checkable
class CheckpointSource(Protocol):
    """Delivers checkpoints by sequence number."""

    async def get_checkpoint(self, sequence_number: int) -> CheckpointData | None:
        """Fetch a checkpoint. Returns None if it is not available yet."""
        ...


@runtime_checkable
class Database(Protocol):
    """Storage operations a handler may use."""

    async def read(
        self,
        stmt: Any,
        params: Mapping[str, Any] | None = None,
        mappings: bool = False,
    ) -> list[Any]:
        ...

    async def insert_ignore(self, table: Any, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert rows in one transaction, skipping existing primary keys."""
        ...


@runtime_checkable
class Handler(Protocol):
    """Turns a checkpoint into rows and appends them."""

    name: str

    def process(self, checkpoint: CheckpointData) -> list[Any]:
        """Pure per-checkpoint computation; safe to run in worker threads."""
        ...

    async def commit(self, values: Sequence[Any], database: Database) -> int:
        """Persist processed values. Must be idempotent per checkpoint."""
        ...


__all__ = ["CheckpointSource", "Database", "Handler"]
