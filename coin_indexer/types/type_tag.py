"""Move type tags: parsing, canonical display, and BCS encoding.

The changelog stores coin types in Move's canonical binary form (BCS):
  TypeTag   = ULEB128 variant index, followed by the variant payload
  StructTag = 32-byte address, module identifier, struct identifier,
              ULEB128-length-prefixed vector of type parameters
Identifiers are ASCII and ULEB128-length-prefixed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

ADDRESS_LENGTH = 32

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_HEX_RE = re.compile(r"^[0-9a-f]+$")
_TOKEN_RE = re.compile(r"\s*(::|<|>|,|[A-Za-z0-9_]+)")

# Variant indices of the Move TypeTag enum.
_VARIANT_INDEX: dict[str, int] = {
    "bool": 0,
    "u8": 1,
    "u64": 2,
    "u128": 3,
    "address": 4,
    "signer": 5,
    "vector": 6,
    "struct": 7,
    "u16": 8,
    "u32": 9,
    "u256": 10,
}

PRIMITIVE_TYPES: frozenset[str] = frozenset(
    name for name in _VARIANT_INDEX if name not in ("vector", "struct")
)


def normalize_address(value: str | bytes) -> str:
    """Return the canonical ``0x`` + 64 lowercase hex form of an address.

    Accepts raw 32-byte values and hex strings with or without the ``0x``
    prefix; short hex forms (``0x2``) are left-padded with zeros.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_LENGTH:
            raise ValueError(
                f"address must be {ADDRESS_LENGTH} bytes, got {len(value)}"
            )
        return "0x" + bytes(value).hex()

    if not isinstance(value, str):
        raise ValueError(f"address must be str or bytes, got {type(value).__name__}")

    raw = value.strip().lower()
    if raw.startswith("0x"):
        raw = raw[2:]
    if not raw or not _HEX_RE.match(raw):
        raise ValueError(f"invalid hex address: {value!r}")
    if len(raw) > ADDRESS_LENGTH * 2:
        raise ValueError(f"address too long: {value!r}")
    return "0x" + raw.rjust(ADDRESS_LENGTH * 2, "0")


def address_bytes(value: str) -> bytes:
    """Raw 32 bytes of an address or object id."""
    return bytes.fromhex(normalize_address(value)[2:])


@dataclass(frozen=True)
class PrimitiveTag:
    """A builtin Move type such as ``u64`` or ``address``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class VectorTag:
    element: TypeTag

    def __str__(self) -> str:
        return f"vector<{self.element}>"


@dataclass(frozen=True)
class StructTag:
    """A struct type ``address::module::Name<T...>``."""

    address: str
    module: str
    name: str
    type_params: tuple[TypeTag, ...] = ()

    def __str__(self) -> str:
        base = f"{normalize_address(self.address)}::{self.module}::{self.name}"
        if not self.type_params:
            return base
        params = ", ".join(str(p) for p in self.type_params)
        return f"{base}<{params}>"

    def is_coin(self) -> bool:
        """True for ``0x2::coin::Coin<T>``."""
        return (
            normalize_address(self.address) == SUI_FRAMEWORK_ADDRESS
            and self.module == "coin"
            and self.name == "Coin"
            and len(self.type_params) == 1
        )


TypeTag = Union[PrimitiveTag, VectorTag, StructTag]


SUI_FRAMEWORK_ADDRESS = normalize_address("0x2")
SUI_SYSTEM_ADDRESS = normalize_address("0x3")

GAS_TYPE_TAG = StructTag(SUI_FRAMEWORK_ADDRESS, "sui", "SUI")
STAKED_SUI_STRUCT = StructTag(SUI_SYSTEM_ADDRESS, "staking_pool", "StakedSui")


def coin_struct(coin_type: TypeTag) -> StructTag:
    """The object type ``0x2::coin::Coin<coin_type>``."""
    return StructTag(SUI_FRAMEWORK_ADDRESS, "coin", "Coin", (coin_type,))


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> list[str]:
        tokens: list[str] = []
        pos = 0
        stripped_len = len(text.rstrip())
        while pos < stripped_len:
            match = _TOKEN_RE.match(text, pos)
            if match is None:
                raise ValueError(f"unexpected character in type tag {text!r} at {pos}")
            tokens.append(match.group(1))
            pos = match.end()
        return tokens

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ValueError(f"unexpected end of type tag {self.text!r}")
        self.pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token != expected:
            raise ValueError(f"expected {expected!r} in {self.text!r}, got {token!r}")

    def _identifier(self) -> str:
        token = self._next()
        if not _IDENTIFIER_RE.match(token):
            raise ValueError(f"invalid identifier {token!r} in {self.text!r}")
        return token

    def parse(self) -> TypeTag:
        tag = self._type_tag()
        if self._peek() is not None:
            raise ValueError(f"trailing input in type tag {self.text!r}")
        return tag

    def _type_tag(self) -> TypeTag:
        token = self._next()
        if token in PRIMITIVE_TYPES:
            return PrimitiveTag(token)
        if token == "vector":
            self._expect("<")
            element = self._type_tag()
            self._expect(">")
            return VectorTag(element)

        address = normalize_address(token)
        self._expect("::")
        module = self._identifier()
        self._expect("::")
        name = self._identifier()

        params: list[TypeTag] = []
        if self._peek() == "<":
            self._next()
            params.append(self._type_tag())
            while self._peek() == ",":
                self._next()
                params.append(self._type_tag())
            self._expect(">")
        return StructTag(address, module, name, tuple(params))


def parse_type_tag(text: str) -> TypeTag:
    """Parse a Move type such as ``0x2::coin::Coin<0x2::sui::SUI>``."""
    return _Parser(text).parse()


# ---------------------------------------------------------------------------
# BCS encoding
# ---------------------------------------------------------------------------


def _uleb128(value: int) -> bytes:
    if value < 0:
        raise ValueError(f"ULEB128 cannot encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _encode_identifier(identifier: str) -> bytes:
    if not _IDENTIFIER_RE.match(identifier):
        raise ValueError(f"invalid identifier: {identifier!r}")
    raw = identifier.encode("ascii")
    return _uleb128(len(raw)) + raw


def _encode_struct(tag: StructTag) -> bytes:
    out = bytearray(address_bytes(tag.address))
    out += _encode_identifier(tag.module)
    out += _encode_identifier(tag.name)
    out += _uleb128(len(tag.type_params))
    for param in tag.type_params:
        out += to_bcs_bytes(param)
    return bytes(out)


def to_bcs_bytes(tag: TypeTag) -> bytes:
    """Encode a type tag in Move's canonical binary format.

    Raises ValueError when the tag holds an invalid address or identifier.
    """
    if isinstance(tag, PrimitiveTag):
        if tag.name not in PRIMITIVE_TYPES:
            raise ValueError(f"unknown primitive type: {tag.name!r}")
        return _uleb128(_VARIANT_INDEX[tag.name])
    if isinstance(tag, VectorTag):
        return _uleb128(_VARIANT_INDEX["vector"]) + to_bcs_bytes(tag.element)
    if isinstance(tag, StructTag):
        return _uleb128(_VARIANT_INDEX["struct"]) + _encode_struct(tag)
    raise ValueError(f"not a type tag: {tag!r}")


__all__ = [
    "ADDRESS_LENGTH",
    "GAS_TYPE_TAG",
    "PRIMITIVE_TYPES",
    "STAKED_SUI_STRUCT",
    "SUI_FRAMEWORK_ADDRESS",
    "SUI_SYSTEM_ADDRESS",
    "PrimitiveTag",
    "StructTag",
    "TypeTag",
    "VectorTag",
    "address_bytes",
    "coin_struct",
    "normalize_address",
    "parse_type_tag",
    "to_bcs_bytes",
]
