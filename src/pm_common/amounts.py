"""Float arithmetic helpers for pool amounts.

Amounts are plain floats; balances are compared within a tolerance
(default 0.01, i.e. one cent) rather than exactly.
"""

import math

from src.pm_common.errors import InvalidStakeError


def is_close(a: float, b: float, tolerance: float) -> bool:
    """True when |a - b| is strictly below tolerance."""
    return math.fabs(a - b) < tolerance


def validate_amount(amount: float) -> None:
    """Raise InvalidStakeError unless amount is a finite number > 0."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidStakeError(amount)
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidStakeError(amount)


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, NaN when the denominator is zero."""
    if denominator == 0:
        return math.nan
    return numerator / denominator
