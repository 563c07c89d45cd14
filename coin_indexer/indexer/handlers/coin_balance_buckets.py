# handler class for tracking balance buckets of address-owned coins -> coin_balance_buckets table

from __future__ import annotations

from typing import Any, Sequence

import bittensor as bt
from sqlalchemy.exc import SQLAlchemyError

from coin_indexer.database.schema.coin_balance_buckets import StoredCoinBalanceBucket
from coin_indexer.errors import SerializationFailure, StoreFailure
from coin_indexer.types.objects import CheckpointData
from coin_indexer.types.type_tag import address_bytes, to_bcs_bytes

from ..changes import BucketDelete, BucketInsert, ProcessedCoinBalanceBucket, detect_changes

_TABLE = StoredCoinBalanceBucket.__table__


def to_stored(value: ProcessedCoinBalanceBucket) -> dict[str, Any]:
    """Map a change record to a ``coin_balance_buckets`` row.

    Inserts carry owner, type and bucket; deletes become tombstones with
    all four columns NULL.
    """
    change = value.change
    row: dict[str, Any] = {
        "object_id": address_bytes(value.object_id),
        "checkpoint_sequence": value.checkpoint_sequence,
    }

    if isinstance(change, BucketInsert):
        try:
            serialized_coin_type = to_bcs_bytes(change.coin_type)
        except ValueError as e:
            raise SerializationFailure(value.object_id, str(e)) from e
        row.update({
            "owner_kind": int(change.owner_kind),
            "owner_id": address_bytes(change.owner_id),
            "coin_type": serialized_coin_type,
            "coin_balance_bucket": change.balance_bucket,
        })
        return row

    if isinstance(change, BucketDelete):
        row.update({
            "owner_kind": None,
            "owner_id": None,
            "coin_type": None,
            "coin_balance_bucket": None,
        })
        return row

    raise TypeError(f"unhandled bucket change: {change!r}")


class CoinBalanceBuckets:
    """Tracks the balance buckets of address-owned coins.

    A row is appended whenever a coin's presence, single owner or balance
    bucket changes. A tombstone is appended when a coin disappears or stops
    being owned by a single address.
    """

    name = "coin_balance_buckets"

    def process(self, checkpoint: CheckpointData) -> list[ProcessedCoinBalanceBucket]:
        """Detect bucket changes in one checkpoint. Pure, no I/O."""
        return detect_changes(
            checkpoint.checkpoint_input_objects().values(),
            checkpoint.latest_live_output_objects(),
            checkpoint.sequence_number,
        )

    async def commit(
        self,
        values: Sequence[ProcessedCoinBalanceBucket],
        database: Any,
    ) -> int:
        """Append change records, ignoring rows that already exist.

        Re-committing a checkpoint that was already written is a no-op, which
        makes redelivery safe. Returns the number of rows inserted.
        """
        if not values:
            return 0

        rows = [to_stored(v) for v in values]
        try:
            inserted = await database.insert_ignore(_TABLE, rows)
        except SQLAlchemyError as e:
            bt.logging.warning({"coin_balance_buckets_commit_error": str(e)})
            raise StoreFailure(f"failed to append {len(rows)} coin balance bucket rows") from e

        bt.logging.debug({
            "coin_balance_buckets": {
                "rows": len(rows),
                "inserted": inserted,
                "duplicates": len(rows) - inserted,
            }
        })
        return inserted


__all__ = ["CoinBalanceBuckets", "to_stored"]
