"""Balance bucket and owner classification for coin objects."""

from __future__ import annotations

from enum import IntEnum

from coin_indexer.errors import InvariantViolation, NotACoin
from coin_indexer.types.objects import AddressOwner, ConsensusV2, ObjectSnapshot

# Buckets are persisted as SMALLINT.
_BUCKET_MAX = 2**15 - 1


class CoinOwnerKind(IntEnum):
    """How a single-owner coin is accessed. Stored as a small integer."""

    FASTPATH = 0
    CONSENSUS = 1


def _ilog10(value: int) -> int:
    """floor(log10(value)) for a positive integer, without float rounding."""
    # 0.30102 < log10(2), so the estimate is a lower bound.
    exponent = (value.bit_length() - 1) * 30102 // 100000
    while 10 ** (exponent + 1) <= value:
        exponent += 1
    return exponent


def balance_bucket(balance: int) -> int:
    """Map a coin balance to its log10 bucket: 0 -> 0, n -> floor(log10(n))."""
    if balance < 0:
        raise InvariantViolation(f"coin balance cannot be negative: {balance}")
    if balance == 0:
        return 0
    bucket = _ilog10(balance)
    if bucket > _BUCKET_MAX:
        raise InvariantViolation(f"balance bucket {bucket} does not fit in 16 bits")
    return bucket


def coin_balance_bucket(snapshot: ObjectSnapshot) -> int:
    """Balance bucket of a coin snapshot.

    Raises NotACoin when the snapshot does not carry a coin balance.
    """
    balance = snapshot.coin_balance()
    if balance is None:
        raise NotACoin(snapshot.object_id)
    return balance_bucket(balance)


def coin_owner(snapshot: ObjectSnapshot) -> tuple[CoinOwnerKind, str] | None:
    """Owner kind and address when the object is owned by a single address."""
    owner = snapshot.owner
    if isinstance(owner, AddressOwner):
        return CoinOwnerKind.FASTPATH, owner.address
    if isinstance(owner, ConsensusV2):
        return CoinOwnerKind.CONSENSUS, owner.authenticator.address
    # Immutable, shared and object-owned coins are not tracked.
    return None


__all__ = [
    "CoinOwnerKind",
    "balance_bucket",
    "coin_balance_bucket",
    "coin_owner",
]
