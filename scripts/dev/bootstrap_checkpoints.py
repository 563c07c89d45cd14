"""Bootstrap a small checkpoint history for local indexer runs.

One-shot script that writes a few deterministic checkpoints to a
filesystem checkpoint directory so the indexer has data to process
immediately.

Usage:
    uv run python scripts/dev/bootstrap_checkpoints.py
    COIN_INDEXER__DATABASE_URL="sqlite+aiosqlite:///coin_indexer.db" \
      uv run coin-indexer --indexer.create_schema --indexer.last_checkpoint 4
"""

import asyncio
import os
import sys

# Ensure project root on sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))


async def main() -> None:
    import bittensor as bt

    from coin_indexer.pipeline.sources.filesystem import FilesystemCheckpointSource
    from coin_indexer.types.checkpoint_builder import (
        CheckpointBuilder,
        derive_address,
        derive_object_id,
    )
    from coin_indexer.types.objects import ConsensusV2, ObjectOwner, SingleOwnerAuthenticator
    from coin_indexer.types.type_tag import StructTag

    bt.logging.info({"bootstrap": "starting"})

    data_dir = os.environ.get(
        "COIN_INDEXER__CHECKPOINT_SOURCE",
        os.path.join(os.path.dirname(__file__), "..", "..", "coin_indexer", "data", "checkpoints"),
    )
    source = FilesystemCheckpointSource(data_dir=data_dir)
    usdc = StructTag("0xa1", "usdc", "USDC")

    builder = CheckpointBuilder(0)
    checkpoints = []

    # 0: mint a few coins
    builder.start_transaction(0)
    builder.create_sui_object(0, 0).create_sui_object(1, 100).create_sui_object(2, 10_010)
    builder.create_coin_object(3, 1, 2_500_000, usdc)
    builder.finish_transaction()
    checkpoints.append(builder.build_checkpoint())

    # 1: split a coin and hand one to address 1
    builder.start_transaction(0)
    builder.transfer_coin_balance(2, 4, 1, 10)
    builder.transfer_object(1, 1)
    builder.finish_transaction()
    checkpoints.append(builder.build_checkpoint())

    # 2: move a coin behind consensus
    builder.start_transaction(1)
    builder.change_object_owner(3, ConsensusV2(
        authenticator=SingleOwnerAuthenticator(address=derive_address(1)),
    ))
    builder.finish_transaction()
    checkpoints.append(builder.build_checkpoint())

    # 3: wrap one coin, park another under an object
    builder.start_transaction(0)
    builder.wrap_object(0)
    builder.change_object_owner(2, ObjectOwner(address=derive_object_id(99)))
    builder.finish_transaction()
    checkpoints.append(builder.build_checkpoint())

    # 4: delete a coin
    builder.start_transaction(1)
    builder.delete_object(4)
    builder.finish_transaction()
    checkpoints.append(builder.build_checkpoint())

    for checkpoint in checkpoints:
        path = await source.put_checkpoint(checkpoint)
        bt.logging.info({
            "bootstrap": "checkpoint_written",
            "sequence_number": checkpoint.sequence_number,
            "transactions": len(checkpoint.transactions),
            "path": str(path),
        })

    bt.logging.info({"bootstrap": "done", "checkpoints": len(checkpoints), "data_dir": data_dir})


if __name__ == "__main__":
    asyncio.run(main())
