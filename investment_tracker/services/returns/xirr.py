# investment_tracker/services/returns/xirr.py
"""
Extended Internal Rate of Return (XIRR).

XIRR is the money-weighted annual return of irregularly dated flows: the
rate that makes their net present value zero.

    Solve for r: Σ CF_i / (1 + r)^((d_i - d_0) / 365) = 0

Solver:
    1. Newton-Raphson from 10%, each step clamped to [-99.9%, 1e6].
       A vanishing derivative nudges the guess up by 0.1 instead of dividing.
    2. If Newton does not converge, bisection on [-99.9%, 1000%], with the
       upper bound widened ×10 (up to 1e6) until the NPV changes sign.
       Very short holding periods annualize to huge rates, which is what
       the widening is for (50% in 20 days is well above 1000%).

Precision Note:
    The solver operates in float for performance (exponentials in every
    iteration). The result is converted back to Decimal with 6 decimal
    places.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from investment_tracker.config import settings
from investment_tracker.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    IRR_BISECTION_HIGH,
    IRR_BISECTION_ITERATIONS,
    IRR_DERIVATIVE_EPSILON,
    IRR_DERIVATIVE_NUDGE,
    IRR_INITIAL_GUESS,
    IRR_MAX_RATE,
    IRR_MIN_RATE,
    IRR_RESULT_PRECISION,
)
from investment_tracker.services.returns.types import CashFlow

logger = logging.getLogger(__name__)

# |NPV| below this counts as an exact root during bisection
_NPV_ROOT_TOLERANCE = 1e-7


def _npv(amounts: list[float], years: list[float], rate: float) -> float:
    return sum(amount / (1 + rate) ** t for amount, t in zip(amounts, years))


def _npv_derivative(amounts: list[float], years: list[float], rate: float) -> float:
    # d/dr [CF / (1+r)^t] = -t × CF / (1+r)^(t+1)
    return sum(-t * amount / (1 + rate) ** (t + 1) for amount, t in zip(amounts, years))


def _to_decimal(rate: float) -> Decimal:
    return Decimal(str(rate)).quantize(IRR_RESULT_PRECISION, rounding=ROUND_HALF_UP)


def _same_sign(a: float, b: float) -> bool:
    return (a > 0 and b > 0) or (a < 0 and b < 0)


def calculate_xirr(
        cash_flows: Sequence[CashFlow],
        max_iterations: int | None = None,
        tolerance: float | None = None,
) -> Decimal | None:
    """
    Calculate the XIRR of a series of dated cash flows.

    Args:
        cash_flows: Flows in any order (negative = invested, positive = returned)
        max_iterations: Newton iteration cap (defaults to settings)
        tolerance: Newton convergence tolerance (defaults to settings)

    Returns:
        Annual rate as decimal (0.10 = 10%), rounded to 6 dp, or None when
        there are fewer than 2 flows, no sign change, or no root exists

    Example:
        cash_flows = [
            CashFlow(date(2024, 1, 1), Decimal("-1000")),
            CashFlow(date(2025, 1, 1), Decimal("1100")),
        ]
        calculate_xirr(cash_flows)  # ~0.10
    """
    if len(cash_flows) < 2:
        return None

    max_iterations = max_iterations or settings.xirr_max_iterations
    tolerance = tolerance or settings.xirr_tolerance

    sorted_flows = sorted(cash_flows, key=lambda cf: cf.date)
    base_date = sorted_flows[0].date

    amounts = [float(cf.amount) for cf in sorted_flows]
    years = [(cf.date - base_date).days / float(CALENDAR_DAYS_PER_YEAR) for cf in sorted_flows]

    has_positive = any(amount > 0 for amount in amounts)
    has_negative = any(amount < 0 for amount in amounts)
    if not (has_positive and has_negative):
        logger.debug("XIRR requires both positive and negative cash flows")
        return None

    rate = IRR_INITIAL_GUESS

    for _ in range(max_iterations):
        try:
            npv = _npv(amounts, years, rate)
            derivative = _npv_derivative(amounts, years, rate)
        except (OverflowError, ZeroDivisionError):
            break

        if abs(derivative) < IRR_DERIVATIVE_EPSILON:
            rate += IRR_DERIVATIVE_NUDGE
            continue

        new_rate = rate - npv / derivative

        if abs(new_rate - rate) < tolerance:
            return _to_decimal(new_rate)

        if math.isnan(new_rate) or math.isinf(new_rate):
            break

        rate = min(max(new_rate, IRR_MIN_RATE), IRR_MAX_RATE)

    logger.debug("XIRR Newton-Raphson did not converge, falling back to bisection")
    return _bisection(amounts, years)


def _bisection(amounts: list[float], years: list[float]) -> Decimal | None:
    try:
        return _bisect(amounts, years)
    except (OverflowError, ZeroDivisionError):
        logger.warning("XIRR NPV overflowed while bracketing the root; returning None")
        return None


def _bisect(amounts: list[float], years: list[float]) -> Decimal | None:
    low = IRR_MIN_RATE
    high = IRR_BISECTION_HIGH

    npv_low = _npv(amounts, years, low)
    npv_high = _npv(amounts, years, high)

    if abs(npv_low) < _NPV_ROOT_TOLERANCE:
        return _to_decimal(low)
    if abs(npv_high) < _NPV_ROOT_TOLERANCE:
        return _to_decimal(high)

    # Widen the bracket for very short holding periods
    while _same_sign(npv_low, npv_high) and high < IRR_MAX_RATE:
        high = min(IRR_MAX_RATE, high * 10)
        npv_high = _npv(amounts, years, high)
        if abs(npv_high) < _NPV_ROOT_TOLERANCE:
            return _to_decimal(high)

    if _same_sign(npv_low, npv_high):
        logger.warning("XIRR has no root in [-0.999, 1e6]; returning None")
        return None

    for _ in range(IRR_BISECTION_ITERATIONS):
        mid = (low + high) / 2
        npv_mid = _npv(amounts, years, mid)

        if abs(npv_mid) < _NPV_ROOT_TOLERANCE:
            return _to_decimal(mid)

        if _same_sign(npv_low, npv_mid):
            low, npv_low = mid, npv_mid
        else:
            high = mid

    return _to_decimal((low + high) / 2)


class XirrCalculator:
    """Object wrapper around calculate_xirr with fixed solver settings."""

    def __init__(self, max_iterations: int | None = None, tolerance: float | None = None) -> None:
        self.max_iterations = max_iterations or settings.xirr_max_iterations
        self.tolerance = tolerance or settings.xirr_tolerance

    def calculate(self, cash_flows: Sequence[CashFlow]) -> Decimal | None:
        return calculate_xirr(cash_flows, self.max_iterations, self.tolerance)
