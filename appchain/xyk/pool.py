"""XYK pool record."""

from dataclasses import dataclass

from appchain.models.types import AccountId, TokenId
from appchain.pairs import CanonicalTokenPair


@dataclass(frozen=True)
class XYKPool:
    """Constant-product pool for one canonical pair.

    Reserves are not stored here; they are the ledger balances of the
    pool account (derived from the pair under the XYK domain).
    """

    owner: AccountId
    pair: CanonicalTokenPair
    account: AccountId
    lp_token_id: TokenId
