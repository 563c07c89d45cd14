"""Filesystem-based CheckpointSource implementation.

Reads one file per checkpoint from a local directory:
  {data_dir}/{sequence_number}.json.gz  (preferred)
  {data_dir}/{sequence_number}.json
"""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Any

from coin_indexer.types.objects import CheckpointData


def _write_gzip_json(path: Path, data: Any) -> None:
    """Write data as gzipped JSON, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = json.dumps(data, default=str, sort_keys=True).encode()
    with gzip.open(path, "wb") as f:
        f.write(raw)


def _read_gzip_json(path: Path) -> Any:
    """Read gzipped JSON file."""
    with gzip.open(path, "rb") as f:
        return json.loads(f.read())


def _read_json(path: Path) -> Any:
    """Read plain JSON file."""
    with open(path) as f:
        return json.load(f)


class FilesystemCheckpointSource:
    """Local directory of checkpoint files."""

    def __init__(self, data_dir: str | Path):
        self.base = Path(data_dir)

    def _paths(self, sequence_number: int) -> tuple[Path, Path]:
        return (
            self.base / f"{sequence_number}.json.gz",
            self.base / f"{sequence_number}.json",
        )

    async def get_checkpoint(self, sequence_number: int) -> CheckpointData | None:
        """Load a checkpoint from disk, or None if no file exists for it."""
        gz_path, json_path = self._paths(sequence_number)
        if gz_path.exists():
            return CheckpointData(**_read_gzip_json(gz_path))
        if json_path.exists():
            return CheckpointData(**_read_json(json_path))
        return None

    async def put_checkpoint(self, checkpoint: CheckpointData) -> Path:
        """Write a checkpoint as gzipped JSON. Returns the file path."""
        gz_path, _ = self._paths(checkpoint.sequence_number)
        _write_gzip_json(gz_path, checkpoint.model_dump(mode="json"))
        return gz_path


__all__ = ["FilesystemCheckpointSource"]
