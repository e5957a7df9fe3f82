"""Canonical token pairs and deterministic key derivation.

Both AMM types address their pools and liquidity tokens through the same
derivation, separated by a DomainTag so that outputs never collide across
types:

    digest = sha256(abi_encode(purpose, domain, token_a, token_b))

- pool key            = last 20 bytes of digest, as an account address
- liquidity token id  = digest as a uint256

The pair is canonicalized first (larger token id first), so (X, Y) and
(Y, X) derive identical keys. Derivations are pure: re-deriving from the
same pair and tag always gives the same output, which is how pools are
looked up without storing their keys anywhere.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum

from eth_abi import encode  # type: ignore[attr-defined]

from appchain.errors import InvalidPair
from appchain.models.types import AccountId, TokenId, normalize_address

# Derivation purposes; part of every preimage
PURPOSE_POOL_KEY = "pool-key"
PURPOSE_LIQUIDITY_TOKEN = "liquidity-token"
PURPOSE_FEE_COLLECTOR_ASSET = "fee-collector-asset"


class DomainTag(str, Enum):
    """AMM type a derived key belongs to."""

    LBP = "lbp"
    XYK = "xyk"


@dataclass(frozen=True)
class CanonicalTokenPair:
    """Order-independent token pair.

    Invariant: token_a > token_b. Use canonicalize() to build one.
    """

    token_a: TokenId
    token_b: TokenId

    def __post_init__(self) -> None:
        if self.token_a <= self.token_b:
            raise InvalidPair(
                f"Pair is not canonical: ({self.token_a}, {self.token_b})"
            )


def canonicalize(a: TokenId, b: TokenId) -> CanonicalTokenPair:
    """Build the canonical pair for two tokens, in either order.

    Raises:
        InvalidPair: If a == b
    """
    if a == b:
        raise InvalidPair(f"Token pair must contain two different tokens: ({a}, {b})")
    if a > b:
        return CanonicalTokenPair(token_a=a, token_b=b)
    return CanonicalTokenPair(token_a=b, token_b=a)


def _pair_digest(purpose: str, pair: CanonicalTokenPair, domain: DomainTag) -> bytes:
    preimage = encode(
        ["string", "string", "uint256", "uint256"],
        [purpose, domain.value, pair.token_a, pair.token_b],
    )
    return hashlib.sha256(preimage).digest()


def derive_pool_key(pair: CanonicalTokenPair, domain: DomainTag) -> AccountId:
    """Ledger account that custodies the pool's reserves and keys its record."""
    digest = _pair_digest(PURPOSE_POOL_KEY, pair, domain)
    return "0x" + digest[-20:].hex()


def derive_liquidity_token_id(pair: CanonicalTokenPair, domain: DomainTag) -> TokenId:
    """Token id of the pool's liquidity share token."""
    digest = _pair_digest(PURPOSE_LIQUIDITY_TOKEN, pair, domain)
    return int.from_bytes(digest, "big")


def derive_fee_collector_asset_key(
    fee_collector: AccountId,
    asset: TokenId,
    domain: DomainTag = DomainTag.LBP,
) -> str:
    """Key of the cumulative-fee entry for one collector and one asset."""
    collector = normalize_address(fee_collector, validate=True)
    preimage = encode(
        ["string", "string", "address", "uint256"],
        [PURPOSE_FEE_COLLECTOR_ASSET, domain.value, bytes.fromhex(collector[2:]), asset],
    )
    return "0x" + hashlib.sha256(preimage).hexdigest()


def pool_key_for(a: TokenId, b: TokenId, domain: DomainTag) -> AccountId:
    """Shorthand: canonicalize then derive the pool key."""
    return derive_pool_key(canonicalize(a, b), domain)
