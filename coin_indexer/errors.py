"""Typed failures raised while classifying and persisting coin buckets.

Everything here propagates to the caller (the pipeline runtime), which
decides whether to retry the whole checkpoint or halt. Retrying is safe
because commits ignore duplicate primary keys.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for indexer failures."""


class NotACoin(IndexerError):
    """Bucket classification was invoked on a snapshot that is not a coin."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        super().__init__(f"Failed to deserialize Coin for {object_id}")


class SerializationFailure(IndexerError):
    """The coin type of a change record could not be BCS-encoded."""

    def __init__(self, object_id: str, reason: str = ""):
        self.object_id = object_id
        message = f"Failed to serialize type for {object_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StoreFailure(IndexerError):
    """The batch append against the changelog store failed."""


class InvariantViolation(IndexerError):
    """Input data broke an invariant the indexer relies on."""


__all__ = [
    "IndexerError",
    "InvariantViolation",
    "NotACoin",
    "SerializationFailure",
    "StoreFailure",
]
