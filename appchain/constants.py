"""Protocol constants for the appchain runtime.

Centralizes weight scale, sale limits and the repay fee schedule.
"""

# Weight scale: MAX_WEIGHT corresponds to 100%
MAX_WEIGHT = 100_000_000

# Minimum weight is MAX_WEIGHT / MIN_WEIGHT_DIVISOR (2%)
MIN_WEIGHT_DIVISOR = 50

# Sale window limit in blocks: 14 days worth of one-second blocks
MAX_SALE_DURATION = 60 * 60 * 24 * 14

# Boosted fee charged until a pool's repay target is collected (20%)
REPAY_FEE_NUMERATOR = 2
REPAY_FEE_DENOMINATOR = 10
