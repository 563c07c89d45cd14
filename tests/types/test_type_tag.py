"""Tests for Move type tag parsing and BCS encoding."""

import pytest

from coin_indexer.types.type_tag import (
    GAS_TYPE_TAG,
    PrimitiveTag,
    StructTag,
    VectorTag,
    address_bytes,
    coin_struct,
    normalize_address,
    parse_type_tag,
    to_bcs_bytes,
)

ADDR_2 = bytes(31) + b"\x02"


class TestAddresses:

    def test_short_form_is_padded(self):
        assert normalize_address("0x2") == "0x" + "0" * 63 + "2"

    def test_bytes_and_hex_agree(self):
        raw = bytes(range(32))
        assert normalize_address(raw) == normalize_address(raw.hex())
        assert address_bytes(normalize_address(raw)) == raw

    def test_uppercase_normalized(self):
        assert normalize_address("0xABC") == normalize_address("0xabc")

    @pytest.mark.parametrize("value", ["", "0x", "0xzz", "0x" + "1" * 65, b"\x00" * 31])
    def test_invalid_addresses(self, value):
        with pytest.raises(ValueError):
            normalize_address(value)


class TestParse:

    def test_coin_type_display(self):
        tag = parse_type_tag("0x2::coin::Coin<0x2::sui::SUI>")
        assert isinstance(tag, StructTag)
        assert tag.is_coin()
        assert tag.type_params == (GAS_TYPE_TAG,)
        assert str(tag) == f"{normalize_address('0x2')}::coin::Coin<{normalize_address('0x2')}::sui::SUI>"
        assert parse_type_tag(str(tag)) == tag

    def test_nested_params(self):
        tag = parse_type_tag("0x5::pool::Pool<vector<u8>, 0x2::sui::SUI, u256>")
        assert tag.type_params == (
            VectorTag(PrimitiveTag("u8")),
            GAS_TYPE_TAG,
            PrimitiveTag("u256"),
        )
        assert not tag.is_coin()

    def test_coin_needs_exactly_one_param(self):
        assert not parse_type_tag("0x2::coin::Coin").is_coin()
        assert not parse_type_tag("0x3::coin::Coin<u64>").is_coin()

    @pytest.mark.parametrize("text", [
        "",
        "0x2::coin",
        "vector<u8",
        "u64>",
        "0xzz::a::b",
        "0x2::1bad::X",
        "0x2::a::b<>",
        "0x2::a::b c",
    ])
    def test_malformed(self, text):
        with pytest.raises(ValueError):
            parse_type_tag(text)


class TestBcs:

    @pytest.mark.parametrize("name,index", [
        ("bool", 0), ("u8", 1), ("u64", 2), ("u128", 3), ("address", 4),
        ("signer", 5), ("u16", 8), ("u32", 9), ("u256", 10),
    ])
    def test_primitive_variants(self, name, index):
        assert to_bcs_bytes(PrimitiveTag(name)) == bytes([index])

    def test_vector(self):
        assert to_bcs_bytes(parse_type_tag("vector<vector<u8>>")) == bytes([6, 6, 1])

    def test_gas_type(self):
        assert to_bcs_bytes(GAS_TYPE_TAG) == b"\x07" + ADDR_2 + b"\x03sui\x03SUI\x00"

    def test_coin_of_gas(self):
        expected = (
            b"\x07" + ADDR_2 + b"\x04coin\x04Coin\x01"
            + b"\x07" + ADDR_2 + b"\x03sui\x03SUI\x00"
        )
        assert to_bcs_bytes(coin_struct(GAS_TYPE_TAG)) == expected

    def test_long_identifier_uses_uleb128_length(self):
        name = "A" * 200
        encoded = to_bcs_bytes(StructTag(normalize_address("0x2"), "m", name))
        assert encoded[-203:-1] == b"\xc8\x01" + name.encode()
        assert encoded[-1:] == b"\x00"

    @pytest.mark.parametrize("tag", [
        PrimitiveTag("u512"),
        StructTag(normalize_address("0x2"), "bad-module", "X"),
        StructTag("not hex", "m", "X"),
        VectorTag(StructTag(normalize_address("0x2"), "m", "")),
    ])
    def test_unencodable(self, tag):
        with pytest.raises(ValueError):
            to_bcs_bytes(tag)
