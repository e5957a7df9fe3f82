"""LBP pricing and fee math.

Pure integer functions; the engine feeds them pool reserves, record fields
and the current block height.

The weighted price is a linear approximation of a weighted pool, since
fractional exponentiation is not available on integer state:

    amount_out_raw = amount_in * reserve_out // (reserve_in + amount_in)
    amount_out     = amount_out_raw * w // (MAX_WEIGHT - w)

where w is the weight interpolated linearly over the sale window.
"""

from __future__ import annotations

import structlog

from appchain.constants import MAX_WEIGHT
from appchain.lbp.errors import SaleIsNotRunning
from appchain.safe_int import S

logger = structlog.get_logger()


def linear_weight(start_x: int, end_x: int, start_y: int, end_y: int, at: int) -> int:
    """Weight at height `at`, interpolated linearly from start_y to end_y.

    `at` is clamped into [start_x, end_x], so heights outside the window
    give the boundary weight rather than an extrapolated one.

    Formula: (start_y * (end_x - at) + end_y * (at - start_x)) // (end_x - start_x)

    Args:
        start_x: Window start height
        end_x: Window end height
        start_y: Weight at start_x
        end_y: Weight at end_x
        at: Height to evaluate

    Returns:
        Interpolated weight, truncated toward zero

    Raises:
        SaleIsNotRunning: If end_x <= start_x
    """
    if end_x <= start_x:
        raise SaleIsNotRunning(f"Empty sale window: start={start_x}, end={end_x}")

    at_clamped = S(at).clamp(start_x, end_x)
    left = S(start_y) * (S(end_x) - at_clamped)
    right = S(end_y) * (at_clamped - start_x)
    return ((left + right) // (S(end_x) - start_x)).value


def calculate_pool_trade_fee(amount: int, numerator: int, denominator: int) -> int:
    """Fee for a trade of `amount` under a numerator / denominator schedule.

    The division is applied before the multiplication:
    (amount // denominator) * numerator. For amounts not divisible by the
    denominator this is lower than amount * numerator // denominator.

    Degenerate schedules:
    - numerator or denominator is 0: no fee
    - numerator == denominator: the whole amount is fee
    """
    if numerator == 0 or denominator == 0:
        return 0
    if numerator == denominator:
        return amount
    return ((S(amount) // denominator) * numerator).value


def calculate_token_out_amount_from_reserves(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    weight_in: int,
    weight_out: int,
    start: int,
    end: int,
    at: int,
    max_weight: int = MAX_WEIGHT,
) -> int:
    """Gross output for selling amount_in, before fees.

    Args:
        reserve_in: Pool balance of the token sold by the trader
        reserve_out: Pool balance of the token bought by the trader
        amount_in: Amount the trader sells
        weight_in: Weight at start (see PoolRecord.weights_for)
        weight_out: Weight at end
        start: Sale window start height
        end: Sale window end height
        at: Current height
        max_weight: Weight scale (100%)

    Raises:
        DivisionByZero: If reserve_in + amount_in is zero or the current
            weight equals max_weight
        SaleIsNotRunning: If end <= start
    """
    weight = linear_weight(start, end, weight_in, weight_out, at)

    amount_out_raw = (S(amount_in) * reserve_out) // (S(reserve_in) + amount_in)
    amount_out = amount_out_raw.mul_div(weight, S(max_weight) - weight)

    logger.debug(
        "lbp_amount_out",
        amount_in=amount_in,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        weight=weight,
        amount_out_raw=amount_out_raw.value,
        amount_out=amount_out.value,
    )
    return amount_out.value


def calculate_amount_in_from_reserves(reserve_in: int, reserve_out: int, amount_out: int) -> int:
    """Input needed for amount_out on the constant-product curve (no weights).

    Formula: reserve_in * amount_out // (reserve_out - amount_out)

    Raises:
        DivisionByZero: If amount_out == reserve_out
        Underflow: If amount_out > reserve_out
    """
    return (S(reserve_in) * amount_out // (S(reserve_out) - amount_out)).value
