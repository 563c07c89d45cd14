"""Append-only changelog of coin balance buckets.

One row per (object_id, checkpoint_sequence). The latest row for an object
is its current state; a row with NULL owner/type/bucket columns is a
tombstone meaning the coin is no longer tracked as of that checkpoint.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, LargeBinary, SmallInteger
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class StoredCoinBalanceBucket(Base):
    __tablename__ = "coin_balance_buckets"

    object_id: Mapped[bytes] = mapped_column(
        LargeBinary,
        primary_key=True,
        comment="32-byte object id",
    )
    checkpoint_sequence: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        comment="Checkpoint in which this state took effect",
    )
    owner_kind: Mapped[int | None] = mapped_column(
        SmallInteger,
        comment="0 = fastpath address owner, 1 = consensus address owner",
    )
    owner_id: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        comment="32-byte owner address",
    )
    coin_type: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        comment="BCS-encoded coin type tag",
    )
    coin_balance_bucket: Mapped[int | None] = mapped_column(
        SmallInteger,
        comment="floor(log10(balance)), 0 for an empty coin",
    )

    __table_args__ = (
        Index(
            "coin_balance_buckets_owner_type_bucket",
            "owner_kind",
            "owner_id",
            "coin_type",
            "coin_balance_bucket",
            "checkpoint_sequence",
            "object_id",
        ),
    )


__all__ = ["StoredCoinBalanceBucket"]
