"""Tests for canonical pairs and key derivation."""

import random

import pytest

from appchain.errors import InvalidPair
from appchain.models.types import is_valid_address
from appchain.pairs import (
    CanonicalTokenPair,
    DomainTag,
    canonicalize,
    derive_fee_collector_asset_key,
    derive_liquidity_token_id,
    derive_pool_key,
    pool_key_for,
)
from tests.helpers import ALICE, BOB, TOKEN_A, TOKEN_B


class TestCanonicalize:
    """Tests for canonicalize()."""

    def test_larger_id_first(self):
        pair = canonicalize(TOKEN_A, TOKEN_B)
        assert pair == CanonicalTokenPair(token_a=TOKEN_B, token_b=TOKEN_A)

    def test_order_independent(self):
        assert canonicalize(3, 7) == canonicalize(7, 3)

    def test_same_token_raises(self):
        with pytest.raises(InvalidPair):
            canonicalize(5, 5)

    def test_non_canonical_construction_raises(self):
        """Building the dataclass directly still enforces the ordering."""
        with pytest.raises(InvalidPair):
            CanonicalTokenPair(token_a=1, token_b=2)


class TestDerivation:
    """Tests for pool key and liquidity token id derivation."""

    def test_pool_key_is_address(self):
        key = derive_pool_key(canonicalize(TOKEN_A, TOKEN_B), DomainTag.LBP)
        assert is_valid_address(key)
        assert key == key.lower()

    def test_derivation_is_deterministic(self):
        pair = canonicalize(TOKEN_A, TOKEN_B)
        assert derive_pool_key(pair, DomainTag.LBP) == derive_pool_key(pair, DomainTag.LBP)
        assert derive_liquidity_token_id(pair, DomainTag.LBP) == derive_liquidity_token_id(
            pair, DomainTag.LBP
        )

    def test_pool_key_argument_order(self):
        assert pool_key_for(TOKEN_A, TOKEN_B, DomainTag.LBP) == pool_key_for(
            TOKEN_B, TOKEN_A, DomainTag.LBP
        )

    def test_domains_differ(self):
        pair = canonicalize(TOKEN_A, TOKEN_B)
        assert derive_pool_key(pair, DomainTag.LBP) != derive_pool_key(pair, DomainTag.XYK)
        assert derive_liquidity_token_id(pair, DomainTag.LBP) != derive_liquidity_token_id(
            pair, DomainTag.XYK
        )

    def test_pool_key_differs_from_liquidity_token(self):
        """Pool key and LP id use different purposes in the preimage."""
        pair = canonicalize(TOKEN_A, TOKEN_B)
        key = derive_pool_key(pair, DomainTag.LBP)
        lp_id = derive_liquidity_token_id(pair, DomainTag.LBP)
        assert int(key, 16) != lp_id % 2**160

    def test_liquidity_token_id_fits_uint256(self):
        lp_id = derive_liquidity_token_id(canonicalize(TOKEN_A, TOKEN_B), DomainTag.XYK)
        assert 0 <= lp_id < 2**256

    def test_liquidity_token_ids_disjoint_across_domains(self):
        """No LBP id equals any XYK id over a sample of pairs."""
        rng = random.Random(1234)
        pairs = set()
        while len(pairs) < 200:
            a, b = rng.randrange(2**64), rng.randrange(2**64)
            if a != b:
                pairs.add(canonicalize(a, b))

        lbp_ids = {derive_liquidity_token_id(p, DomainTag.LBP) for p in pairs}
        xyk_ids = {derive_liquidity_token_id(p, DomainTag.XYK) for p in pairs}

        assert len(lbp_ids) == len(pairs)
        assert len(xyk_ids) == len(pairs)
        assert lbp_ids.isdisjoint(xyk_ids)


class TestFeeCollectorAssetKey:
    """Tests for the fee-collector-asset key."""

    def test_key_per_collector_and_asset(self):
        keys = {
            derive_fee_collector_asset_key(ALICE, TOKEN_A),
            derive_fee_collector_asset_key(ALICE, TOKEN_B),
            derive_fee_collector_asset_key(BOB, TOKEN_A),
        }
        assert len(keys) == 3

    def test_case_insensitive_collector(self):
        upper = "0x" + BOB[2:].upper()
        assert derive_fee_collector_asset_key(upper, TOKEN_A) == derive_fee_collector_asset_key(
            BOB, TOKEN_A
        )

    def test_invalid_collector_raises(self):
        with pytest.raises(ValueError):
            derive_fee_collector_asset_key("0x1234", TOKEN_A)
