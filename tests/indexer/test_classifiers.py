"""Tests for balance bucket and owner classification."""

import pytest

from coin_indexer.errors import InvariantViolation, NotACoin
from coin_indexer.indexer.classifiers import (
    CoinOwnerKind,
    balance_bucket,
    coin_balance_bucket,
    coin_owner,
)
from coin_indexer.types.checkpoint_builder import derive_address, derive_object_id
from coin_indexer.types.objects import (
    AddressOwner,
    ConsensusV2,
    Immutable,
    ObjectOwner,
    ObjectSnapshot,
    Shared,
    SingleOwnerAuthenticator,
)
from coin_indexer.types.type_tag import GAS_TYPE_TAG, STAKED_SUI_STRUCT, coin_struct

SUI_COIN = str(coin_struct(GAS_TYPE_TAG))


def _coin(balance, owner=None):
    return ObjectSnapshot(
        object_id=derive_object_id(0),
        type=SUI_COIN,
        owner=owner or AddressOwner(address=derive_address(0)),
        balance=balance,
    )


class TestBalanceBucket:

    @pytest.mark.parametrize("balance,expected", [
        (0, 0),
        (1, 0),
        (9, 0),
        (10, 1),
        (99, 1),
        (100, 2),
        (999_999, 5),
        (1_000_000, 6),
        (10_010, 4),
        (2**64 - 1, 19),
    ])
    def test_log10_buckets(self, balance, expected):
        assert balance_bucket(balance) == expected

    def test_exact_powers_of_ten(self):
        for exponent in range(0, 60):
            assert balance_bucket(10**exponent) == exponent
            if exponent:
                assert balance_bucket(10**exponent - 1) == exponent - 1

    def test_negative_balance_rejected(self):
        with pytest.raises(InvariantViolation):
            balance_bucket(-1)

    def test_bucket_must_fit_smallint(self):
        assert balance_bucket(10**32767) == 32767
        with pytest.raises(InvariantViolation):
            balance_bucket(10**32768)


class TestCoinBalanceBucket:

    def test_coin_snapshots(self):
        assert coin_balance_bucket(_coin(0)) == 0
        assert coin_balance_bucket(_coin(1)) == 0
        assert coin_balance_bucket(_coin(100)) == 2
        assert coin_balance_bucket(_coin(1_000_000)) == 6

    def test_non_coin_raises(self):
        staked = ObjectSnapshot(
            object_id=derive_object_id(7),
            type=str(STAKED_SUI_STRUCT),
            owner=AddressOwner(address=derive_address(0)),
        )
        with pytest.raises(NotACoin) as exc:
            coin_balance_bucket(staked)
        assert exc.value.object_id == derive_object_id(7)
        assert "Failed to deserialize Coin" in str(exc.value)

    def test_coin_without_balance_raises(self):
        with pytest.raises(NotACoin):
            coin_balance_bucket(_coin(None))


class TestCoinOwner:

    def test_address_owner_is_fastpath(self):
        addr = derive_address(1)
        assert coin_owner(_coin(5, AddressOwner(address=addr))) == (CoinOwnerKind.FASTPATH, addr)

    def test_single_owner_consensus(self):
        addr = derive_address(2)
        owner = ConsensusV2(start_version=4, authenticator=SingleOwnerAuthenticator(address=addr))
        assert coin_owner(_coin(5, owner)) == (CoinOwnerKind.CONSENSUS, addr)

    @pytest.mark.parametrize("owner", [
        ObjectOwner(address=derive_address(3)),
        Shared(initial_shared_version=1),
        Immutable(),
    ])
    def test_untracked_owners(self, owner):
        assert coin_owner(_coin(5, owner)) is None

    def test_owner_kind_values(self):
        assert int(CoinOwnerKind.FASTPATH) == 0
        assert int(CoinOwnerKind.CONSENSUS) == 1
