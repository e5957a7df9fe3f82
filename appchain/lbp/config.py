"""LBP configuration."""

from dataclasses import dataclass, field

from appchain.constants import MAX_SALE_DURATION, MAX_WEIGHT, MIN_WEIGHT_DIVISOR
from appchain.lbp.pool import REPAY_FEE, FeeSchedule


@dataclass(frozen=True)
class LBPConfig:
    """Tunables of the LBP engine.

    Attributes:
        max_weight: Weight scale; this value is 100% (exclusive upper bound)
        min_weight_divisor: Lowest accepted weight is max_weight // this (2%)
        max_sale_duration: Longest allowed end - start, in blocks
        repay_fee: Fee schedule applied until a pool's repay target is reached
    """

    max_weight: int = MAX_WEIGHT
    min_weight_divisor: int = MIN_WEIGHT_DIVISOR
    max_sale_duration: int = MAX_SALE_DURATION
    repay_fee: FeeSchedule = field(default=REPAY_FEE)

    @property
    def min_weight(self) -> int:
        return self.max_weight // self.min_weight_divisor


# Default configuration instance
DEFAULT_LBP_CONFIG = LBPConfig()
