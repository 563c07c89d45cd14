"""Checkpoint pipeline: sources, handler protocol and the indexer loop."""

from .interface import CheckpointSource, Database, Handler
from .runtime import IndexerRuntime
from .sources import FilesystemCheckpointSource, HTTPCheckpointSource

__all__ = [
    "CheckpointSource",
    "Database",
    "FilesystemCheckpointSource",
    "HTTPCheckpointSource",
    "Handler",
    "IndexerRuntime",
]
