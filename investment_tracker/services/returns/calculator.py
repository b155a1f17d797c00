# investment_tracker/services/returns/calculator.py
"""
Period return calculators.

Formulas:
    Simple Return = (End - Start) / Start

    Modified Dietz:
        weight_i = (TotalDays - DaysSinceStart_i) / TotalDays
        R = (End - Start - ΣCF_i) / (Start + Σ CF_i × weight_i)

    Time-Weighted Return (snapshot linking):
        TWR = (Before_1 / Start) × (Before_2 / After_1) × ... × (End / After_n) - 1

The valuation baseline (start/end values and snapshots) is supplied by the
caller. A zero start value is not special-cased in Modified Dietz: the
weighted flows become the whole denominator. TWR skips sub-periods whose
starting value is not positive, so a portfolio funded from zero is
measured from its first positive valuation onward.

Undefined results return None rather than raising.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from investment_tracker.services.constants import ONE, ZERO
from investment_tracker.services.returns.types import (
    ReturnCashFlow,
    ReturnCashFlowEvent,
    ValuationSnapshot,
)

logger = logging.getLogger(__name__)


def to_return_cash_flows(events: Iterable[ReturnCashFlowEvent]) -> list[ReturnCashFlow]:
    """Convert strategy events into Modified Dietz input."""
    return [ReturnCashFlow(date=event.transaction_date, amount=event.amount) for event in events]


class ReturnCalculator:
    """Stateless Modified Dietz / TWR / simple return calculator."""

    # =========================================================================
    # SIMPLE RETURN
    # =========================================================================

    def calculate_simple_return(
            self,
            start_value: Decimal,
            end_value: Decimal,
    ) -> Decimal | None:
        """
        (End - Start) / Start, with NO cash flow adjustment.

        Returns:
            Return as decimal (0.15 = 15%), or None if start_value is 0
        """
        if start_value == ZERO:
            return None
        return (end_value - start_value) / start_value

    # =========================================================================
    # MODIFIED DIETZ
    # =========================================================================

    def calculate_modified_dietz(
            self,
            start_value: Decimal,
            end_value: Decimal,
            period_start: date,
            period_end: date,
            cash_flows: Sequence[ReturnCashFlow],
    ) -> Decimal | None:
        """
        Calculate the Modified Dietz return of a period.

        Flows dated outside ``[period_start, period_end]`` are ignored.

        Args:
            start_value: Portfolio value at period start
            end_value: Portfolio value at period end
            period_start: First day of the period
            period_end: Last day of the period
            cash_flows: External flows (positive = contribution)

        Returns:
            Period return as decimal, or None when the period is empty or
            the weighted capital base is not positive
        """
        total_days = (period_end - period_start).days
        if total_days <= 0:
            return None

        total_days_decimal = Decimal(total_days)
        total_flow = ZERO
        weighted_flow = ZERO

        for cash_flow in cash_flows:
            if cash_flow.date < period_start or cash_flow.date > period_end:
                continue

            days_since_start = (cash_flow.date - period_start).days
            weight = Decimal(total_days - days_since_start) / total_days_decimal

            total_flow += cash_flow.amount
            weighted_flow += cash_flow.amount * weight

        numerator = end_value - start_value - total_flow
        denominator = start_value + weighted_flow

        if denominator <= ZERO:
            logger.debug(
                f"Modified Dietz undefined for {period_start}..{period_end}: "
                f"denominator={denominator}"
            )
            return None

        return numerator / denominator

    # =========================================================================
    # TIME-WEIGHTED RETURN
    # =========================================================================

    def calculate_time_weighted_return(
            self,
            start_value: Decimal,
            end_value: Decimal,
            snapshots: Sequence[ValuationSnapshot],
    ) -> Decimal | None:
        """
        Chain sub-period returns between cash-flow snapshots.

        Snapshots are ordered by date with a stable sort, so same-day
        snapshots keep caller order.

        Example:
            Start 1000, snapshot (before 1100, after 1600), end 1760
            -> (1100 / 1000) × (1760 / 1600) - 1 = 0.21

        Returns:
            TWR as decimal, or None when no sub-period had a positive start
        """
        ordered = sorted(snapshots, key=lambda snapshot: snapshot.date)

        factor = ONE
        current_start = start_value
        has_period = False

        for snapshot in ordered:
            if current_start > ZERO:
                factor *= snapshot.value_before / current_start
                has_period = True
            current_start = snapshot.value_after

        if current_start > ZERO:
            factor *= end_value / current_start
            has_period = True

        if not has_period:
            return None

        return factor - ONE
