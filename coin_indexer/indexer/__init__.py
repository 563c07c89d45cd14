"""Coin balance bucket change detection and persistence.

Each checkpoint is classified independently: the detector compares the
objects before and after the checkpoint and yields at most one change
record per coin, and the handler appends those records to the
coin_balance_buckets changelog with conflict-ignore semantics.
"""

from .changes import (
    BucketChange,
    BucketDelete,
    BucketInsert,
    ProcessedCoinBalanceBucket,
    detect_changes,
)
from .classifiers import CoinOwnerKind, balance_bucket, coin_balance_bucket, coin_owner
from .handlers import CoinBalanceBuckets, to_stored
from .queries import CoinBucketEntry, current_coin_buckets

__all__ = [
    "BucketChange",
    "BucketDelete",
    "BucketInsert",
    "CoinBalanceBuckets",
    "CoinBucketEntry",
    "CoinOwnerKind",
    "ProcessedCoinBalanceBucket",
    "balance_bucket",
    "coin_balance_bucket",
    "coin_owner",
    "current_coin_buckets",
    "detect_changes",
    "to_stored",
]
