# investment_tracker/services/positions/calculator.py
"""
Stock position calculator.

Builds per-ticker positions from the recorded trade history using the
moving weighted-average cost method (not FIFO/LIFO):

- BUY: shares and cost increase by the trade's total cost
- SELL: cost is removed at the pre-sale average, leaving the average of
  the remaining shares unchanged
- SPLIT: shares are multiplied by the ratio stored in ``shares``; cost kept
- ADJUSTMENT: shares and cost are added directly

Design Principles:
- Stateless (no instance state, pure functions)
- Replayable: the same history always yields the same Position
- Uses Decimal for ALL financial calculations

Usage:
    calculator = PositionCalculator()
    position = calculator.calculate_position("AAPL", transactions)
    pnl = calculator.calculate_unrealized_pnl(position, Decimal("190"), Decimal("31.5"))
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from investment_tracker.services.constants import HUNDRED, ONE, ZERO
from investment_tracker.services.exceptions import InvalidTransactionError
from investment_tracker.services.positions.splits import StockSplitAdjustmentService
from investment_tracker.services.positions.types import (
    Position,
    StockSplit,
    StockTransaction,
    StockTransactionType,
    UnrealizedPnl,
)

logger = logging.getLogger(__name__)


def _chronological_key(transaction: StockTransaction) -> tuple:
    # Records without a creation time sort first within their day
    created_at = transaction.created_at
    return (
        transaction.transaction_date,
        created_at is not None,
        created_at.timestamp() if created_at is not None else 0.0,
    )


def _home_cost(transaction: StockTransaction) -> Decimal:
    """Cost in home currency; source cost when no exchange rate is recorded."""
    cost_home = transaction.total_cost_home
    if cost_home is None:
        return transaction.total_cost_source
    return cost_home


# =============================================================================
# POSITION CALCULATOR
# =============================================================================

class PositionCalculator:
    """
    Calculates stock positions and profit/loss.

    All methods are pure. Transactions are filtered to the requested ticker,
    deleted records are skipped, and the rest are replayed by date then
    creation time (stable, so same-day records keep caller order).
    """

    def calculate_position(
            self,
            ticker: str,
            transactions: Iterable[StockTransaction],
    ) -> Position:
        """
        Calculate the current position for a ticker.

        Args:
            ticker: Ticker to aggregate (matched case-insensitively)
            transactions: Trade history, may contain other tickers

        Returns:
            Position; all zero when there is no history
        """
        return self._replay(ticker, transactions, split_adjust=None)

    def calculate_position_with_split_adjustments(
            self,
            ticker: str,
            transactions: Iterable[StockTransaction],
            splits: Iterable[StockSplit],
            split_service: StockSplitAdjustmentService | None = None,
    ) -> Position:
        """
        Calculate a position on today's share basis.

        Shares of every trade are scaled by the splits that happened after
        it. Costs are unchanged, since a split never changes what was paid.
        """
        service = split_service or StockSplitAdjustmentService()
        split_list = list(splits)

        def adjust(transaction: StockTransaction) -> Decimal:
            return service.get_adjusted_values(transaction, split_list).adjusted_shares

        return self._replay(ticker, transactions, split_adjust=adjust)

    def recalculate_all_positions(
            self,
            transactions: Iterable[StockTransaction],
    ) -> list[Position]:
        """Positions for every ticker present in the history, in first-seen order."""
        active = [t for t in transactions if not t.is_deleted]
        return [self.calculate_position(ticker, active) for ticker in _distinct_tickers(active)]

    def recalculate_all_positions_with_split_adjustments(
            self,
            transactions: Iterable[StockTransaction],
            splits: Iterable[StockSplit],
            split_service: StockSplitAdjustmentService | None = None,
    ) -> list[Position]:
        active = [t for t in transactions if not t.is_deleted]
        split_list = list(splits)
        service = split_service or StockSplitAdjustmentService()
        return [
            self.calculate_position_with_split_adjustments(ticker, active, split_list, service)
            for ticker in _distinct_tickers(active)
        ]

    def calculate_unrealized_pnl(
            self,
            position: Position,
            current_price: Decimal,
            current_exchange_rate: Decimal,
    ) -> UnrealizedPnl:
        """
        Mark a position to market.

        Returns a zero result when no shares are held. The percentage is 0
        when the position has no cost basis.
        """
        if position.total_shares == ZERO:
            return UnrealizedPnl(ZERO, ZERO, ZERO)

        current_value_home = position.total_shares * current_price * current_exchange_rate
        pnl_home = current_value_home - position.total_cost_home
        percentage = (
            pnl_home / position.total_cost_home * HUNDRED
            if position.total_cost_home > ZERO
            else ZERO
        )

        return UnrealizedPnl(
            current_value_home=current_value_home,
            unrealized_pnl_home=pnl_home,
            unrealized_pnl_percentage=percentage,
        )

    def calculate_realized_pnl(
            self,
            position_before_sell: Position,
            sell_transaction: StockTransaction,
    ) -> Decimal:
        """
        Realized P&L of a sell against the pre-sale average cost.

        Proceeds follow the market rounding rule: Taiwan subtotals are
        floored to an integer before fees are subtracted and the rate
        applied. Other markets keep full decimal precision.

        Raises:
            InvalidTransactionError: If the transaction is not a SELL
        """
        if sell_transaction.transaction_type != StockTransactionType.SELL:
            raise InvalidTransactionError(
                "Transaction must be a sell transaction", field="transaction_type"
            )

        cost_basis = sell_transaction.shares * position_before_sell.average_cost_per_share_home
        rate = sell_transaction.exchange_rate if sell_transaction.exchange_rate is not None else ONE
        proceeds = sell_transaction.net_proceeds_source * rate

        return proceeds - cost_basis

    # =========================================================================
    # PRIVATE
    # =========================================================================

    def _replay(self, ticker, transactions, split_adjust) -> Position:
        ticker_key = ticker.strip().upper()
        history = sorted(
            (t for t in transactions if t.ticker == ticker_key and not t.is_deleted),
            key=_chronological_key,
        )

        if not history:
            return Position.empty(ticker_key)

        total_shares = ZERO
        total_cost_home = ZERO
        total_cost_source = ZERO

        for transaction in history:
            shares = split_adjust(transaction) if split_adjust else transaction.shares
            transaction_type = transaction.transaction_type

            if transaction_type == StockTransactionType.BUY:
                total_shares += shares
                total_cost_home += _home_cost(transaction)
                total_cost_source += transaction.total_cost_source

            elif transaction_type == StockTransactionType.SELL:
                if total_shares <= ZERO:
                    logger.warning(
                        f"Ignoring sell of {transaction.shares} {ticker_key} "
                        f"on {transaction.transaction_date}: no shares held"
                    )
                    continue
                average_home = total_cost_home / total_shares
                average_source = total_cost_source / total_shares
                total_cost_home -= shares * average_home
                total_cost_source -= shares * average_source
                total_shares -= shares

            elif transaction_type == StockTransactionType.SPLIT:
                # Manual splits keep the raw ratio even when registry splits apply
                total_shares *= transaction.shares

            elif transaction_type == StockTransactionType.ADJUSTMENT:
                total_shares += shares
                total_cost_home += _home_cost(transaction)
                total_cost_source += transaction.total_cost_source

        total_shares = max(ZERO, total_shares)
        if total_shares == ZERO:
            total_cost_home = ZERO
            total_cost_source = ZERO
        total_cost_home = max(ZERO, total_cost_home)
        total_cost_source = max(ZERO, total_cost_source)

        average_home = total_cost_home / total_shares if total_shares > ZERO else ZERO
        average_source = total_cost_source / total_shares if total_shares > ZERO else ZERO

        logger.debug(
            f"Position {ticker_key}: {len(history)} transactions, "
            f"shares={total_shares}, cost_home={total_cost_home}"
        )

        return Position(
            ticker=ticker_key,
            total_shares=total_shares,
            total_cost_home=total_cost_home,
            total_cost_source=total_cost_source,
            average_cost_per_share_home=average_home,
            average_cost_per_share_source=average_source,
        )


def _distinct_tickers(transactions: list[StockTransaction]) -> list[str]:
    return list(dict.fromkeys(t.ticker for t in transactions))
