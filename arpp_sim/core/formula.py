"""Adjusted reference price (ARPP) curve."""

import math
from decimal import Decimal

ONE = Decimal("1")
HALF_PI = Decimal(str(math.pi / 2))


def arpp(p_ref: Decimal, alpha: Decimal, beta: Decimal, r: Decimal) -> Decimal:
    """Quote a price from the pool imbalance.

    price = p_ref * (1 + alpha * atan(beta * (r - 1)))

    The arctan term saturates, so the quote stays inside
    p_ref * (1 +/- alpha * pi/2) however imbalanced the pool gets.

    Args:
        p_ref: Reference (equilibrium) price, must be > 0
        alpha: Curvature weight, the maximum fractional deviation
        beta: Sensitivity to small deviations from balance, must be > 0
        r: Imbalance ratio, must be > 0

    Returns:
        Quoted price as Decimal
    """
    angle = beta * (r - ONE)
    # atan runs in float, the result is brought back to Decimal before
    # touching p_ref so balance accounting stays decimal.
    atan_value = Decimal(str(math.atan(float(angle))))
    return p_ref * (ONE + alpha * atan_value)


def token_ratio(token_a: Decimal, token_b: Decimal) -> Decimal:
    """Imbalance ratio token_b / token_a (0 for an empty A side)."""
    if token_a == 0:
        return Decimal("0")
    return token_b / token_a


def price_bounds(p_ref: Decimal, alpha: Decimal) -> tuple[Decimal, Decimal]:
    """Saturation bounds of the curve for a given reference price."""
    spread = abs(alpha) * HALF_PI
    return p_ref * (ONE - spread), p_ref * (ONE + spread)
