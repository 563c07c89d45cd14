"""Deterministic checkpoint builder for local runs and tests.

Keeps a view of the live object set across checkpoints so that consecutive
``build_checkpoint()`` calls describe a consistent history:

    builder = CheckpointBuilder(1)
    builder.start_transaction(0).create_sui_object(0, 100).finish_transaction()
    first = builder.build_checkpoint()
    builder.start_transaction(0).transfer_object(0, 1).finish_transaction()
    second = builder.build_checkpoint()

Objects and addresses are referred to by small integer indices, which map
to stable ids through ``derive_object_id`` / ``derive_address``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from .objects import (
    AddressOwner,
    CheckpointData,
    CheckpointTransaction,
    ObjectSnapshot,
    Owner,
)
from .type_tag import GAS_TYPE_TAG, StructTag, TypeTag, coin_struct, normalize_address

GAS_VALUE_FOR_TESTING = 1_000_000_000_000


def _derive(domain: bytes, index: int) -> str:
    digest = hashlib.blake2b(domain + index.to_bytes(8, "little"), digest_size=32).digest()
    return normalize_address(digest)


def derive_address(index: int) -> str:
    return _derive(b"address", index)


def derive_object_id(index: int) -> str:
    return _derive(b"object", index)


@dataclass
class _TransactionState:
    sender: str
    inputs: dict[str, ObjectSnapshot] = field(default_factory=dict)
    outputs: dict[str, ObjectSnapshot] = field(default_factory=dict)
    created: set[str] = field(default_factory=set)
    removed: list[str] = field(default_factory=list)


class CheckpointBuilder:
    """Builds ``CheckpointData`` from high level object operations."""

    def __init__(self, checkpoint: int = 0):
        self.checkpoint = checkpoint
        self._live: dict[str, ObjectSnapshot] = {}
        self._transactions: list[CheckpointTransaction] = []
        self._tx: _TransactionState | None = None

    # -- Transactions --

    def start_transaction(self, sender_idx: int) -> CheckpointBuilder:
        if self._tx is not None:
            raise RuntimeError("a transaction is already in progress")
        self._tx = _TransactionState(sender=derive_address(sender_idx))
        return self

    def finish_transaction(self) -> CheckpointBuilder:
        tx = self._current()
        self._transactions.append(CheckpointTransaction(
            digest=f"tx-{self.checkpoint}-{len(self._transactions)}",
            input_objects=list(tx.inputs.values()),
            output_objects=list(tx.outputs.values()),
            removed_object_ids=list(tx.removed),
        ))
        self._live.update(tx.outputs)
        for object_id in tx.removed:
            self._live.pop(object_id, None)
        self._tx = None
        return self

    def build_checkpoint(self) -> CheckpointData:
        if self._tx is not None:
            raise RuntimeError("finish the current transaction before building")
        checkpoint = CheckpointData(
            sequence_number=self.checkpoint,
            transactions=self._transactions,
        )
        self.checkpoint += 1
        self._transactions = []
        return checkpoint

    # -- Object creation --

    def create_object(
        self,
        object_idx: int,
        owner: Owner,
        object_type: StructTag,
        balance: int | None = None,
    ) -> CheckpointBuilder:
        tx = self._current()
        object_id = derive_object_id(object_idx)
        if object_id in self._live or object_id in tx.outputs:
            raise ValueError(f"object {object_idx} already exists")
        tx.created.add(object_id)
        tx.outputs[object_id] = ObjectSnapshot(
            object_id=object_id,
            version=1,
            type=str(object_type),
            owner=owner,
            balance=balance,
        )
        return self

    def create_coin_object(
        self,
        object_idx: int,
        owner_idx: int,
        balance: int,
        coin_type: TypeTag,
    ) -> CheckpointBuilder:
        return self.create_object(
            object_idx,
            AddressOwner(address=derive_address(owner_idx)),
            coin_struct(coin_type),
            balance,
        )

    def create_sui_object(self, object_idx: int, balance: int) -> CheckpointBuilder:
        """Create a SUI coin owned by the transaction sender."""
        tx = self._current()
        return self.create_object(
            object_idx,
            AddressOwner(address=tx.sender),
            coin_struct(GAS_TYPE_TAG),
            balance,
        )

    def create_owned_object(self, object_idx: int) -> CheckpointBuilder:
        return self.create_sui_object(object_idx, GAS_VALUE_FOR_TESTING)

    # -- Mutations --

    def transfer_object(self, object_idx: int, recipient_idx: int) -> CheckpointBuilder:
        return self.change_object_owner(
            object_idx, AddressOwner(address=derive_address(recipient_idx)),
        )

    def change_object_owner(self, object_idx: int, owner: Owner) -> CheckpointBuilder:
        current = self._read(object_idx)
        self._write(current.model_copy(update={"owner": owner}))
        return self

    def transfer_coin_balance(
        self,
        object_idx: int,
        new_object_idx: int,
        recipient_idx: int,
        amount: int,
    ) -> CheckpointBuilder:
        """Split ``amount`` off a coin into a new coin owned by the recipient."""
        current = self._read(object_idx)
        if not current.is_coin() or current.balance is None:
            raise ValueError(f"object {object_idx} is not a coin")
        if amount > current.balance:
            raise ValueError(
                f"insufficient balance: {current.balance} < {amount}"
            )
        self._write(current.model_copy(update={"balance": current.balance - amount}))
        return self.create_object(
            new_object_idx,
            AddressOwner(address=derive_address(recipient_idx)),
            current.struct_tag,
            amount,
        )

    def delete_object(self, object_idx: int) -> CheckpointBuilder:
        self._remove(object_idx)
        return self

    def wrap_object(self, object_idx: int) -> CheckpointBuilder:
        # Wrapped objects leave the live set exactly like deleted ones.
        self._remove(object_idx)
        return self

    # -- Internals --

    def _current(self) -> _TransactionState:
        if self._tx is None:
            raise RuntimeError("no transaction in progress")
        return self._tx

    def _read(self, object_idx: int) -> ObjectSnapshot:
        tx = self._current()
        object_id = derive_object_id(object_idx)
        if object_id in tx.outputs:
            return tx.outputs[object_id]
        if object_id not in self._live:
            raise ValueError(f"object {object_idx} does not exist")
        snapshot = self._live[object_id]
        tx.inputs.setdefault(object_id, snapshot)
        return snapshot

    def _write(self, snapshot: ObjectSnapshot) -> None:
        tx = self._current()
        if snapshot.object_id not in tx.created:
            snapshot = snapshot.model_copy(update={"version": snapshot.version + 1})
        tx.outputs[snapshot.object_id] = snapshot

    def _remove(self, object_idx: int) -> None:
        tx = self._current()
        snapshot = self._read(object_idx)
        tx.outputs.pop(snapshot.object_id, None)
        tx.created.discard(snapshot.object_id)
        tx.removed.append(snapshot.object_id)


__all__ = [
    "GAS_VALUE_FOR_TESTING",
    "CheckpointBuilder",
    "derive_address",
    "derive_object_id",
]
