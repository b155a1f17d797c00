# investment_tracker/services/positions/splits.py
"""
Stock split adjustment.

Historical trades are normalized to today's share basis on the fly; the
recorded transactions are never mutated.

    AdjustedShares = OriginalShares × CumulativeRatio
    AdjustedPrice  = OriginalPrice  / CumulativeRatio

The cumulative ratio is the product of every split for the same symbol and
market dated strictly after the trade. Prices are never floored, so
adjusted_shares × adjusted_price == shares × price.

Example:
    0050 split 1:4 on 2025-06-18; a 2024-01-15 buy of 10 @ 160
    -> 40 shares @ 40, total 1600 preserved.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from investment_tracker.services.constants import ONE, ZERO
from investment_tracker.services.positions.types import (
    AdjustedTransactionValues,
    StockMarket,
    StockSplit,
    StockTransaction,
    detect_market,
)

logger = logging.getLogger(__name__)


class StockSplitAdjustmentService:
    """
    Computes split-adjusted shares and prices.

    All methods are pure; the service holds no state.
    """

    def get_cumulative_split_ratio(
            self,
            symbol: str,
            market: StockMarket,
            transaction_date: date,
            splits: Iterable[StockSplit],
    ) -> Decimal:
        """
        Product of split ratios that occur after ``transaction_date``.

        Returns:
            Cumulative ratio, 1 when no split applies
        """
        symbol_key = symbol.strip().upper()
        applicable = sorted(
            (
                split for split in splits
                if split.symbol.strip().upper() == symbol_key
                and split.market == market
                and split.split_date > transaction_date
            ),
            key=lambda split: split.split_date,
        )

        ratio = ONE
        for split in applicable:
            ratio *= split.split_ratio
        return ratio

    def get_adjusted_shares(
            self,
            original_shares: Decimal,
            symbol: str,
            market: StockMarket,
            transaction_date: date,
            splits: Iterable[StockSplit],
    ) -> Decimal:
        ratio = self.get_cumulative_split_ratio(symbol, market, transaction_date, splits)
        return original_shares * ratio

    def get_adjusted_price(
            self,
            original_price: Decimal,
            symbol: str,
            market: StockMarket,
            transaction_date: date,
            splits: Iterable[StockSplit],
    ) -> Decimal:
        ratio = self.get_cumulative_split_ratio(symbol, market, transaction_date, splits)
        if ratio == ZERO:
            return original_price
        return original_price / ratio

    def get_adjusted_values(
            self,
            transaction: StockTransaction,
            splits: Iterable[StockSplit],
    ) -> AdjustedTransactionValues:
        """
        Apply every applicable split to one transaction.

        The market is derived from the ticker shape, not the recorded
        market, so split records registered per ticker shape always match.
        """
        market = self.detect_market(transaction.ticker)
        ratio = self.get_cumulative_split_ratio(
            transaction.ticker, market, transaction.transaction_date, splits
        )

        adjusted_price = (
            transaction.price_per_share / ratio if ratio != ZERO
            else transaction.price_per_share
        )

        if ratio != ONE:
            logger.debug(
                f"Split-adjusted {transaction.ticker} on {transaction.transaction_date}: "
                f"ratio={ratio}"
            )

        return AdjustedTransactionValues(
            original_shares=transaction.shares,
            adjusted_shares=transaction.shares * ratio,
            original_price=transaction.price_per_share,
            adjusted_price=adjusted_price,
            split_ratio=ratio,
            has_split_adjustment=ratio != ONE,
        )

    def detect_market(self, symbol: str | None) -> StockMarket:
        return detect_market(symbol)
