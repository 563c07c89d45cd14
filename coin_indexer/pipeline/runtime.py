"""Indexer runtime.

Main loop: fetch a window of checkpoints -> process them concurrently in
worker threads -> commit them one by one in sequence order.

A failed cycle is retried from the first uncommitted checkpoint. This is
safe because handlers commit with conflict-ignore semantics, so replaying
a checkpoint never duplicates rows.
"""

from __future__ import annotations

import asyncio
from typing import Any

import bittensor as bt

from coin_indexer.config import IndexerConfig
from coin_indexer.errors import InvariantViolation

from .interface import CheckpointSource, Database, Handler


class IndexerRuntime:
    """Drives one handler over a stream of checkpoints."""

    def __init__(
        self,
        source: CheckpointSource,
        handler: Handler,
        database: Database,
        config: IndexerConfig | None = None,
    ):
        self.source = source
        self.handler = handler
        self.database = database
        self.config = config or IndexerConfig()

        self.next_checkpoint = self.config.first_checkpoint
        self.rows_committed = 0
        self._running = False

    @property
    def done(self) -> bool:
        last = self.config.last_checkpoint
        return last is not None and self.next_checkpoint > last

    async def run(self) -> None:
        """Main indexer loop. Runs until stopped or past last_checkpoint."""
        self._running = True
        bt.logging.info({
            "indexer_runtime": {
                "status": "starting",
                "handler": self.handler.name,
                "first_checkpoint": self.next_checkpoint,
                "last_checkpoint": self.config.last_checkpoint,
                "concurrency": self.config.concurrency,
            }
        })

        consecutive_errors = 0
        max_errors = self.config.max_consecutive_errors
        poll_interval = self.config.poll_interval_seconds

        while self._running and not self.done:
            try:
                committed = await self._cycle()
                consecutive_errors = 0
            except asyncio.CancelledError:
                break
            except Exception as e:
                consecutive_errors += 1
                bt.logging.error({
                    "indexer_cycle_error": str(e),
                    "checkpoint": self.next_checkpoint,
                    "consecutive": consecutive_errors,
                })
                if consecutive_errors >= max_errors:
                    bt.logging.error({"indexer_runtime": "too_many_errors, stopping"})
                    self._running = False
                    raise
                await asyncio.sleep(min(30.0, 5 * poll_interval * consecutive_errors))
                continue

            if committed == 0:
                try:
                    await asyncio.sleep(poll_interval)
                except asyncio.CancelledError:
                    break

        self._running = False
        bt.logging.info({
            "indexer_runtime": "stopped",
            "next_checkpoint": self.next_checkpoint,
            "rows_committed": self.rows_committed,
        })

    def stop(self) -> None:
        """Signal the runtime to stop."""
        self._running = False

    async def _fetch_window(self) -> list[Any]:
        start = self.next_checkpoint
        end = start + self.config.concurrency
        if self.config.last_checkpoint is not None:
            end = min(end, self.config.last_checkpoint + 1)

        sequence_numbers = list(range(start, end))
        fetched = await asyncio.gather(
            *(self.source.get_checkpoint(seq) for seq in sequence_numbers)
        )

        # Only a contiguous prefix can be committed in order.
        checkpoints = []
        for seq, checkpoint in zip(sequence_numbers, fetched):
            if checkpoint is None:
                break
            if checkpoint.sequence_number != seq:
                raise InvariantViolation(
                    f"source returned checkpoint {checkpoint.sequence_number} "
                    f"when asked for {seq}"
                )
            checkpoints.append(checkpoint)
        return checkpoints

    async def _cycle(self) -> int:
        """Process and commit the next available checkpoints.

        Returns the number of checkpoints committed.
        """
        checkpoints = await self._fetch_window()
        if not checkpoints:
            return 0

        processed = await asyncio.gather(
            *(asyncio.to_thread(self.handler.process, cp) for cp in checkpoints),
            return_exceptions=True,
        )

        committed = 0
        for checkpoint, values in zip(checkpoints, processed):
            if isinstance(values, BaseException):
                # Checkpoints before the failure stay committed.
                raise values
            rows = await self.handler.commit(values, self.database)
            self.next_checkpoint = checkpoint.sequence_number + 1
            self.rows_committed += rows
            committed += 1
            bt.logging.debug({
                "indexer_commit": {
                    "handler": self.handler.name,
                    "checkpoint": checkpoint.sequence_number,
                    "values": len(values),
                    "rows": rows,
                }
            })

        bt.logging.info({
            "indexer_cycle": {
                "committed_checkpoints": committed,
                "next_checkpoint": self.next_checkpoint,
            }
        })
        return committed


__all__ = ["IndexerRuntime"]
