"""Coin balance bucket indexer entrypoint.

Reads checkpoints from a local directory or a remote checkpoint store,
detects coin balance bucket changes, and appends them to the
coin_balance_buckets table.
"""

import argparse
import asyncio
import os
import signal
import sys

import bittensor as bt
from dotenv import load_dotenv


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("COIN_INDEXER_TEST_MODE") != "true":
        load_dotenv()

    from coin_indexer import config as indexer_config

    parser = argparse.ArgumentParser(description="Coin balance bucket indexer")
    bt.logging.add_args(parser)
    indexer_config.add_args(parser)
    args = parser.parse_args()

    # env > CLI > defaults
    config = indexer_config.load_config(args)

    bt.logging.info({
        "indexer_config": {
            "checkpoint_source": config.checkpoint_source,
            "first_checkpoint": config.first_checkpoint,
            "last_checkpoint": config.last_checkpoint,
            "concurrency": config.concurrency,
            "poll_interval": config.poll_interval_seconds,
        }
    })

    from coin_indexer.database import DBM
    from coin_indexer.indexer.handlers import CoinBalanceBuckets
    from coin_indexer.pipeline import (
        FilesystemCheckpointSource,
        HTTPCheckpointSource,
        IndexerRuntime,
    )
    from coin_indexer.utils import check_python_requirements, ping_database

    check_python_requirements(config.database_url)

    dbm = DBM.get_manager(config)
    if config.source_is_remote:
        source = HTTPCheckpointSource(base_url=config.checkpoint_source)
    else:
        source = FilesystemCheckpointSource(data_dir=config.checkpoint_source)

    runtime = IndexerRuntime(
        source=source,
        handler=CoinBalanceBuckets(),
        database=dbm,
        config=config,
    )

    # Graceful shutdown
    loop = asyncio.new_event_loop()

    def _signal_handler(sig, frame):
        bt.logging.info({"indexer": "shutdown_signal_received"})
        runtime.stop()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    exit_code = 0
    try:
        if config.create_schema:
            loop.run_until_complete(dbm.create_schema())
        if not loop.run_until_complete(ping_database(dbm)):
            bt.logging.error("database is not reachable")
            exit_code = 1
        else:
            loop.run_until_complete(runtime.run())
    except KeyboardInterrupt:
        bt.logging.info({"indexer": "keyboard_interrupt"})
    except Exception as e:
        bt.logging.error({"indexer": "fatal", "error": str(e)})
        exit_code = 1
    finally:
        if isinstance(source, HTTPCheckpointSource):
            loop.run_until_complete(source.close())
        loop.run_until_complete(dbm.dispose())
        loop.close()
        bt.logging.info({"indexer": "stopped", "next_checkpoint": runtime.next_checkpoint})

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
