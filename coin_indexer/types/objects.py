"""Pydantic models for on-chain objects and the checkpoints that carry them.

A checkpoint is delivered as a list of transactions. Each transaction lists
the object versions it read (inputs), the versions it wrote (outputs), and
the ids it deleted or wrapped. The indexer only ever looks at two derived
views: the objects as they were before the checkpoint and the objects that
are still live after it.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .type_tag import StructTag, TypeTag, normalize_address, parse_type_tag


@lru_cache(maxsize=4096)
def _struct_tag(type_str: str) -> StructTag:
    tag = parse_type_tag(type_str)
    if not isinstance(tag, StructTag):
        raise ValueError(f"object type must be a struct, got {type_str!r}")
    return tag


ObjectID = Annotated[str, BeforeValidator(normalize_address)]
SuiAddress = Annotated[str, BeforeValidator(normalize_address)]


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


class AddressOwner(BaseModel):
    """Owned by a single address, accessed on the fast path."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["address_owner"] = "address_owner"
    address: SuiAddress


class ObjectOwner(BaseModel):
    """Owned by another object (dynamic fields, wrapped children)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["object_owner"] = "object_owner"
    address: SuiAddress


class Shared(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["shared"] = "shared"
    initial_shared_version: int = 1


class Immutable(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["immutable"] = "immutable"


class SingleOwnerAuthenticator(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["single_owner"] = "single_owner"
    address: SuiAddress


class ConsensusV2(BaseModel):
    """Owned by a single address but sequenced through consensus."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["consensus_v2"] = "consensus_v2"
    start_version: int = 1
    authenticator: SingleOwnerAuthenticator


Owner = Annotated[
    Union[AddressOwner, ObjectOwner, Shared, Immutable, ConsensusV2],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


class ObjectSnapshot(BaseModel):
    """One version of an object.

    ``type`` is the Move struct type of the object (None for packages).
    ``balance`` is the decoded coin value and is only meaningful when the
    object is a coin.
    """

    model_config = ConfigDict(frozen=True)

    object_id: ObjectID
    version: int = Field(default=1, ge=0)
    type: str | None = None
    owner: Owner
    balance: int | None = Field(default=None, ge=0)

    @field_validator("type")
    @classmethod
    def _canonical_type(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return str(_struct_tag(value))

    @property
    def struct_tag(self) -> StructTag | None:
        # Derived from ``type`` on every access so copies never go stale.
        if self.type is None:
            return None
        return _struct_tag(self.type)

    def is_coin(self) -> bool:
        tag = self.struct_tag
        return tag is not None and tag.is_coin()

    def coin_type(self) -> TypeTag | None:
        """The ``T`` of ``Coin<T>``, or None when this is not a coin."""
        if not self.is_coin():
            return None
        return self.struct_tag.type_params[0]

    def coin_balance(self) -> int | None:
        """Coin value, or None when the object does not decode as a coin."""
        if not self.is_coin():
            return None
        return self.balance


# ---------------------------------------------------------------------------
# Checkpoints
# ---------------------------------------------------------------------------


class CheckpointTransaction(BaseModel):
    """Object effects of a single transaction."""

    digest: str = ""
    input_objects: list[ObjectSnapshot] = Field(default_factory=list)
    output_objects: list[ObjectSnapshot] = Field(default_factory=list)
    removed_object_ids: list[ObjectID] = Field(
        default_factory=list,
        description="Objects deleted or wrapped by this transaction",
    )


class CheckpointData(BaseModel):
    """A sequence-numbered batch of transactions processed together."""

    sequence_number: int = Field(ge=0)
    transactions: list[CheckpointTransaction] = Field(default_factory=list)

    def checkpoint_input_objects(self) -> dict[str, ObjectSnapshot]:
        """Objects as they existed immediately before this checkpoint.

        Inputs whose id was already written by an earlier transaction of the
        same checkpoint are intermediate versions and are skipped.
        """
        seen_outputs: set[str] = set()
        inputs: dict[str, ObjectSnapshot] = {}
        for tx in self.transactions:
            for obj in tx.input_objects:
                if obj.object_id in seen_outputs or obj.object_id in inputs:
                    continue
                inputs[obj.object_id] = obj
            for obj in tx.output_objects:
                seen_outputs.add(obj.object_id)
        return inputs

    def latest_live_output_objects(self) -> list[ObjectSnapshot]:
        """Final version of every object still live after this checkpoint."""
        live: dict[str, ObjectSnapshot] = {}
        for tx in self.transactions:
            for obj in tx.output_objects:
                live[obj.object_id] = obj
            for object_id in tx.removed_object_ids:
                live.pop(object_id, None)
        return [live[k] for k in sorted(live)]


__all__ = [
    "AddressOwner",
    "CheckpointData",
    "CheckpointTransaction",
    "ConsensusV2",
    "Immutable",
    "ObjectID",
    "ObjectOwner",
    "ObjectSnapshot",
    "Owner",
    "Shared",
    "SingleOwnerAuthenticator",
    "SuiAddress",
]
