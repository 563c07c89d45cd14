"""On-chain object, ownership and Move type models."""

from .objects import (
    AddressOwner,
    CheckpointData,
    CheckpointTransaction,
    ConsensusV2,
    Immutable,
    ObjectOwner,
    ObjectSnapshot,
    Owner,
    Shared,
    SingleOwnerAuthenticator,
)
from .type_tag import (
    GAS_TYPE_TAG,
    PrimitiveTag,
    StructTag,
    TypeTag,
    VectorTag,
    address_bytes,
    coin_struct,
    normalize_address,
    parse_type_tag,
    to_bcs_bytes,
)

__all__ = [
    "GAS_TYPE_TAG",
    "AddressOwner",
    "CheckpointData",
    "CheckpointTransaction",
    "ConsensusV2",
    "Immutable",
    "ObjectOwner",
    "ObjectSnapshot",
    "Owner",
    "PrimitiveTag",
    "Shared",
    "SingleOwnerAuthenticator",
    "StructTag",
    "TypeTag",
    "VectorTag",
    "address_bytes",
    "coin_struct",
    "normalize_address",
    "parse_type_tag",
    "to_bcs_bytes",
]
