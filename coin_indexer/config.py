"""Indexer configuration.

Values come from CLI arguments, with ``COIN_INDEXER__<FIELD>`` environment
variables taking precedence (env > CLI > defaults).
"""

from __future__ import annotations

import argparse
import os
from typing import Any, Mapping

from pydantic import BaseModel, Field

ENV_PREFIX = "COIN_INDEXER__"


class IndexerConfig(BaseModel):
    """Runtime settings for the coin balance bucket indexer."""

    database_url: str = "sqlite+aiosqlite:///coin_indexer.db"
    checkpoint_source: str = Field(
        default="coin_indexer/data/checkpoints",
        description="Directory of checkpoint files or http(s) base URL",
    )
    first_checkpoint: int = Field(default=0, ge=0)
    last_checkpoint: int | None = Field(default=None, ge=0)
    concurrency: int = Field(default=4, ge=1)
    poll_interval_seconds: float = Field(default=1.0, gt=0)
    max_consecutive_errors: int = Field(default=10, ge=1)
    create_schema: bool = False

    @property
    def source_is_remote(self) -> bool:
        return self.checkpoint_source.startswith(("http://", "https://"))


def add_args(parser: argparse.ArgumentParser) -> None:
    """Register indexer options on an argument parser."""
    parser.add_argument("--indexer.database_url", type=str, default=None)
    parser.add_argument("--indexer.checkpoint_source", type=str, default=None)
    parser.add_argument("--indexer.first_checkpoint", type=int, default=None)
    parser.add_argument("--indexer.last_checkpoint", type=int, default=None)
    parser.add_argument("--indexer.concurrency", type=int, default=None)
    parser.add_argument("--indexer.poll_interval", type=float, default=None)
    parser.add_argument("--indexer.max_consecutive_errors", type=int, default=None)
    parser.add_argument("--indexer.create_schema", action="store_true", default=None)


# CLI dest -> config field
_CLI_FIELDS = {
    "indexer.database_url": "database_url",
    "indexer.checkpoint_source": "checkpoint_source",
    "indexer.first_checkpoint": "first_checkpoint",
    "indexer.last_checkpoint": "last_checkpoint",
    "indexer.concurrency": "concurrency",
    "indexer.poll_interval": "poll_interval_seconds",
    "indexer.max_consecutive_errors": "max_consecutive_errors",
    "indexer.create_schema": "create_schema",
}


def load_config(
    args: argparse.Namespace | None = None,
    environ: Mapping[str, str] | None = None,
) -> IndexerConfig:
    """Merge CLI arguments and environment variables into an IndexerConfig."""
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    if args is not None:
        for dest, field_name in _CLI_FIELDS.items():
            value = getattr(args, dest, None)
            if value is not None:
                values[field_name] = value

    for field_name in IndexerConfig.model_fields:
        env_value = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if env_value is not None and env_value != "":
            values[field_name] = env_value

    return IndexerConfig(**values)


__all__ = ["ENV_PREFIX", "IndexerConfig", "add_args", "load_config"]
