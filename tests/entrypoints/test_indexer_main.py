"""Runs the indexer entrypoint against a local checkpoint directory."""

import asyncio
import os
import sys
import tempfile

import pytest
from sqlalchemy import text

from coin_indexer.database import DBM
from coin_indexer.entrypoints import indexer
from coin_indexer.pipeline.sources.filesystem import FilesystemCheckpointSource
from coin_indexer.types.checkpoint_builder import CheckpointBuilder


@pytest.fixture
def workdir(monkeypatch):
    monkeypatch.setenv("COIN_INDEXER_TEST_MODE", "true")
    monkeypatch.setattr(indexer.signal, "signal", lambda *args: None)
    for key in list(os.environ):
        if key.startswith("COIN_INDEXER__"):
            monkeypatch.delenv(key)
    with tempfile.TemporaryDirectory() as d:
        yield d


def _write_history(data_dir):
    source = FilesystemCheckpointSource(data_dir)
    builder = CheckpointBuilder(0)
    builder.start_transaction(0).create_sui_object(0, 100).create_sui_object(1, 5).finish_transaction()
    cp0 = builder.build_checkpoint()
    builder.start_transaction(0).delete_object(1).finish_transaction()
    cp1 = builder.build_checkpoint()

    async def _put():
        for cp in (cp0, cp1):
            await source.put_checkpoint(cp)

    asyncio.run(_put())


def _count_rows(url):
    async def _count():
        dbm = DBM(url)
        try:
            rows = await dbm.read(text("SELECT COUNT(*) FROM coin_balance_buckets"))
            return rows[0][0]
        finally:
            await dbm.dispose()

    return asyncio.run(_count())


class TestIndexerMain:

    def test_indexes_local_checkpoints(self, workdir, monkeypatch):
        data_dir = os.path.join(workdir, "checkpoints")
        url = f"sqlite+aiosqlite:///{os.path.join(workdir, 'main.db')}"
        _write_history(data_dir)

        monkeypatch.setattr(sys, "argv", [
            "coin-indexer",
            "--indexer.checkpoint_source", data_dir,
            "--indexer.last_checkpoint", "1",
            "--indexer.create_schema",
        ])
        monkeypatch.setenv("COIN_INDEXER__DATABASE_URL", url)

        indexer.main()

        # two inserts, one tombstone
        assert _count_rows(url) == 3

    def test_fatal_error_exits_nonzero(self, workdir, monkeypatch):
        data_dir = os.path.join(workdir, "checkpoints")
        _write_history(data_dir)
        url = f"sqlite+aiosqlite:///{os.path.join(workdir, 'noschema.db')}"

        # No schema: every commit fails until the runtime gives up.
        monkeypatch.setattr(sys, "argv", [
            "coin-indexer",
            "--indexer.database_url", url,
            "--indexer.checkpoint_source", data_dir,
            "--indexer.last_checkpoint", "1",
            "--indexer.max_consecutive_errors", "1",
        ])

        with pytest.raises(SystemExit) as exc:
            indexer.main()
        assert exc.value.code == 1
