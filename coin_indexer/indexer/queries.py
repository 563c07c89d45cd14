"""Read side of the coin_balance_buckets changelog.

The table is append-only, so the current state of an object is its row
with the highest checkpoint_sequence. Objects whose latest row is a
tombstone have no tracked bucket.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import text

from coin_indexer.types.type_tag import TypeTag, address_bytes, normalize_address, to_bcs_bytes

from .classifiers import CoinOwnerKind

_LATEST_ROWS = """
    SELECT object_id, checkpoint_sequence, owner_kind, owner_id,
           coin_type, coin_balance_bucket,
           ROW_NUMBER() OVER (
               PARTITION BY object_id ORDER BY checkpoint_sequence DESC
           ) AS rn
    FROM coin_balance_buckets
"""

_SELECT_CURRENT_BUCKETS = text(f"""
    SELECT object_id, checkpoint_sequence, owner_kind, owner_id,
           coin_type, coin_balance_bucket
    FROM ({_LATEST_ROWS}) latest
    WHERE rn = 1
      AND owner_id = :owner_id
    ORDER BY coin_balance_bucket DESC, object_id
""")

_SELECT_CURRENT_BUCKETS_BY_TYPE = text(f"""
    SELECT object_id, checkpoint_sequence, owner_kind, owner_id,
           coin_type, coin_balance_bucket
    FROM ({_LATEST_ROWS}) latest
    WHERE rn = 1
      AND owner_id = :owner_id
      AND coin_type = :coin_type
    ORDER BY coin_balance_bucket DESC, object_id
""")


@dataclass(frozen=True)
class CoinBucketEntry:
    """Current tracked state of one coin."""

    object_id: str
    checkpoint_sequence: int
    owner_kind: CoinOwnerKind
    owner_id: str
    coin_type: bytes
    balance_bucket: int


async def current_coin_buckets(
    database: Any,
    owner_id: str,
    coin_type: TypeTag | None = None,
) -> list[CoinBucketEntry]:
    """Coins currently owned by ``owner_id``, largest bucket first."""
    params: dict[str, Any] = {"owner_id": address_bytes(owner_id)}
    stmt = _SELECT_CURRENT_BUCKETS
    if coin_type is not None:
        params["coin_type"] = to_bcs_bytes(coin_type)
        stmt = _SELECT_CURRENT_BUCKETS_BY_TYPE

    rows = await database.read(stmt, params=params, mappings=True)
    return [
        CoinBucketEntry(
            object_id=normalize_address(bytes(r["object_id"])),
            checkpoint_sequence=int(r["checkpoint_sequence"]),
            owner_kind=CoinOwnerKind(r["owner_kind"]),
            owner_id=normalize_address(bytes(r["owner_id"])),
            coin_type=bytes(r["coin_type"]),
            balance_bucket=int(r["coin_balance_bucket"]),
        )
        for r in rows
    ]


__all__ = ["CoinBucketEntry", "current_coin_buckets"]
