"""Change detection for coin balance buckets.

Given the objects as they were before a checkpoint and the objects live
after it, decide for every touched coin whether its tracked state changed:

- a single-owner coin that is gone after the checkpoint (deleted or
  wrapped) gets a Delete;
- a coin that stops being single-owner (shared, immutable, object-owned)
  gets a Delete;
- a single-owner coin that is new, changed owner, or moved to a different
  balance bucket gets an Insert carrying its new state;
- anything else produces nothing.

At most one record is produced per object id, and records come back in
object id order. Detection is a pure function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from coin_indexer.errors import InvariantViolation
from coin_indexer.types.objects import ObjectSnapshot
from coin_indexer.types.type_tag import TypeTag

from .classifiers import CoinOwnerKind, coin_balance_bucket, coin_owner


@dataclass(frozen=True)
class BucketInsert:
    """The coin is owned by a single address with this type and bucket."""

    owner_kind: CoinOwnerKind
    owner_id: str
    coin_type: TypeTag
    balance_bucket: int


@dataclass(frozen=True)
class BucketDelete:
    """The coin is no longer tracked (tombstone)."""


BucketChange = Union[BucketInsert, BucketDelete]


@dataclass(frozen=True)
class ProcessedCoinBalanceBucket:
    """One changelog record for one object in one checkpoint."""

    object_id: str
    checkpoint_sequence: int
    change: BucketChange


def detect_changes(
    before: Iterable[ObjectSnapshot],
    after: Iterable[ObjectSnapshot],
    checkpoint_sequence: int,
) -> list[ProcessedCoinBalanceBucket]:
    """Classify every touched coin of one checkpoint.

    Args:
        before: Objects as of immediately before the checkpoint. Only objects
            read by the checkpoint need to be present.
        after: Latest live version of every object after the checkpoint,
            one per object id.
        checkpoint_sequence: Sequence number stamped on every record.

    Returns:
        Change records ordered by object id.

    Raises:
        NotACoin: a coin snapshot could not be classified into a bucket.
        InvariantViolation: an object changed between coin and non-coin.
    """
    inputs = {obj.object_id: obj for obj in before}
    outputs = {obj.object_id: obj for obj in after}
    values: dict[str, ProcessedCoinBalanceBucket] = {}

    def emit(object_id: str, change: BucketChange) -> None:
        values[object_id] = ProcessedCoinBalanceBucket(
            object_id=object_id,
            checkpoint_sequence=checkpoint_sequence,
            change=change,
        )

    # Single-owner coins that were deleted or wrapped. Only ids absent from
    # the outputs are considered here, the loop below only sees ids present
    # in them, so the two passes never write the same key.
    for object_id, input_object in inputs.items():
        if not input_object.is_coin():
            continue
        if coin_owner(input_object) is None:
            continue
        if object_id in outputs:
            continue
        emit(object_id, BucketDelete())

    for object_id, output_object in outputs.items():
        input_object = inputs.get(object_id)
        coin_type = output_object.coin_type()
        if coin_type is None:
            if input_object is not None and input_object.is_coin():
                raise InvariantViolation(
                    f"object {object_id} was a coin before checkpoint "
                    f"{checkpoint_sequence} but is not one after it"
                )
            continue

        if input_object is not None:
            input_bucket: int | None = coin_balance_bucket(input_object)
            input_owner = coin_owner(input_object)
        else:
            input_bucket, input_owner = None, None

        output_bucket = coin_balance_bucket(output_object)
        output_owner = coin_owner(output_object)

        if input_owner is not None and output_owner is None:
            # Became shared, immutable or object-owned: stop tracking it.
            emit(object_id, BucketDelete())
        elif output_owner is not None and (
            input_owner != output_owner or input_bucket != output_bucket
        ):
            # Also covers coins created or unwrapped in this checkpoint.
            owner_kind, owner_id = output_owner
            emit(object_id, BucketInsert(
                owner_kind=owner_kind,
                owner_id=owner_id,
                coin_type=coin_type,
                balance_bucket=output_bucket,
            ))

    return [values[k] for k in sorted(values)]


__all__ = [
    "BucketChange",
    "BucketDelete",
    "BucketInsert",
    "ProcessedCoinBalanceBucket",
    "detect_changes",
]
