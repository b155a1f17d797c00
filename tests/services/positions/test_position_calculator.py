# tests/services/positions/test_position_calculator.py
"""
Unit tests for the stock position calculator.

All tests use known values that can be verified by hand.

Test Coverage:
- Buy / Sell / Split / Adjustment replay (moving weighted average)
- Taiwan proceeds flooring and missing exchange rates
- Ordering, deleted records and multi-ticker recalculation
- Unrealized and realized P&L
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import make_stock_transaction
from investment_tracker.services.exceptions import InvalidTransactionError
from investment_tracker.services.positions import (
    Position,
    PositionCalculator,
    StockMarket,
    StockSplit,
    StockTransactionType,
)


@pytest.fixture
def calculator() -> PositionCalculator:
    return PositionCalculator()


# =============================================================================
# BUY / SELL REPLAY
# =============================================================================

class TestCalculatePosition:
    """Tests for PositionCalculator.calculate_position."""

    def test_single_buy_includes_fees_and_rate(self, calculator):
        """10.5 @ 100 + 5 fees at 31.5 -> 1055 source, 33232.5 home."""
        buy = make_stock_transaction(shares="10.5", price="100", fees="5", exchange_rate="31.5")

        position = calculator.calculate_position("AAPL", [buy])

        assert position.total_shares == Decimal("10.5")
        assert position.total_cost_source == Decimal("1055")
        assert position.total_cost_home == Decimal("33232.5")
        assert position.average_cost_per_share_home == Decimal("3165")

    def test_two_buys_weighted_average(self, calculator):
        transactions = [
            make_stock_transaction(shares="10", price="100", exchange_rate="30", on=date(2024, 1, 1)),
            make_stock_transaction(shares="10", price="200", exchange_rate="30", on=date(2024, 2, 1)),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position.total_shares == Decimal("20")
        assert position.total_cost_home == Decimal("90000")
        assert position.average_cost_per_share_home == Decimal("4500")
        assert position.average_cost_per_share_source == Decimal("150")

    def test_sell_keeps_average_cost(self, calculator):
        transactions = [
            make_stock_transaction(shares="10", price="100", exchange_rate="30", on=date(2024, 1, 1)),
            make_stock_transaction(
                transaction_type=StockTransactionType.SELL,
                shares="4", price="150", exchange_rate="31", on=date(2024, 3, 1),
            ),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position.total_shares == Decimal("6")
        assert position.total_cost_home == Decimal("18000")
        assert position.average_cost_per_share_home == Decimal("3000")

    def test_sell_everything_zeroes_costs(self, calculator):
        transactions = [
            make_stock_transaction(shares="3", price="100", exchange_rate="30", on=date(2024, 1, 1)),
            make_stock_transaction(
                transaction_type=StockTransactionType.SELL, shares="3", price="120", on=date(2024, 2, 1),
            ),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position == Position(ticker="AAPL")

    def test_sell_without_holdings_is_ignored(self, calculator):
        sell = make_stock_transaction(transaction_type=StockTransactionType.SELL, shares="5")

        position = calculator.calculate_position("AAPL", [sell])

        assert position.total_shares == Decimal("0")
        assert position.total_cost_home == Decimal("0")

    def test_oversell_clamps_to_zero(self, calculator):
        transactions = [
            make_stock_transaction(shares="2", price="100", on=date(2024, 1, 1)),
            make_stock_transaction(
                transaction_type=StockTransactionType.SELL, shares="5", price="100", on=date(2024, 2, 1),
            ),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position.total_shares == Decimal("0")
        assert position.total_cost_home == Decimal("0")
        assert position.total_cost_source == Decimal("0")

    def test_missing_rate_uses_source_cost(self, calculator):
        buy = make_stock_transaction(ticker="2330", shares="1000", price="580", fees="20")

        position = calculator.calculate_position("2330", [buy])

        assert position.total_cost_home == Decimal("580020")
        assert position.total_cost_source == Decimal("580020")

    def test_taiwan_subtotal_floored(self, calculator):
        """3 × 27.25 = 81.75 floors to 81 for a Taiwan ticker."""
        buy = make_stock_transaction(ticker="0056", shares="3", price="27.25")

        position = calculator.calculate_position("0056", [buy])

        assert position.total_cost_source == Decimal("81")

    def test_empty_history_returns_empty_position(self, calculator):
        assert calculator.calculate_position("MSFT", []) == Position.empty("MSFT")

    def test_ticker_match_is_case_insensitive(self, calculator):
        buy = make_stock_transaction(ticker="aapl", shares="1", price="10")

        position = calculator.calculate_position(" Aapl ", [buy])

        assert position.ticker == "AAPL"
        assert position.total_shares == Decimal("1")

    def test_other_tickers_and_deleted_records_skipped(self, calculator):
        transactions = [
            make_stock_transaction(ticker="AAPL", shares="1", price="10"),
            make_stock_transaction(ticker="MSFT", shares="5", price="10"),
            make_stock_transaction(ticker="AAPL", shares="7", price="10", is_deleted=True),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position.total_shares == Decimal("1")

    def test_replay_order_is_date_then_creation_time(self, calculator):
        """A same-day sell created after the buy is applied after it."""
        day = date(2024, 5, 1)
        sell = make_stock_transaction(
            transaction_type=StockTransactionType.SELL, shares="5", price="10",
            on=day, created_at=datetime(2024, 5, 1, 10, 0),
        )
        buy = make_stock_transaction(
            shares="10", price="10", on=day, created_at=datetime(2024, 5, 1, 9, 0),
        )

        position = calculator.calculate_position("AAPL", [sell, buy])

        assert position.total_shares == Decimal("5")


# =============================================================================
# SPLIT / ADJUSTMENT
# =============================================================================

class TestSplitAndAdjustment:
    """Tests for manual split and adjustment records."""

    def test_manual_split_multiplies_shares_and_keeps_cost(self, calculator):
        transactions = [
            make_stock_transaction(shares="10", price="100", on=date(2024, 1, 1)),
            make_stock_transaction(
                transaction_type=StockTransactionType.SPLIT, shares="2", price="0", on=date(2024, 6, 1),
            ),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position.total_shares == Decimal("20")
        assert position.total_cost_home == Decimal("1000")
        assert position.average_cost_per_share_home == Decimal("50")

    def test_adjustment_adds_shares_and_cost(self, calculator):
        transactions = [
            make_stock_transaction(shares="10", price="100", on=date(2024, 1, 1)),
            make_stock_transaction(
                transaction_type=StockTransactionType.ADJUSTMENT, shares="2", price="0", on=date(2024, 2, 1),
            ),
        ]

        position = calculator.calculate_position("AAPL", transactions)

        assert position.total_shares == Decimal("12")
        assert position.total_cost_home == Decimal("1000")

    def test_registered_split_adjusts_earlier_trades(self, calculator):
        """0050 split 1:4 on 2025-06-18; 10 @ 160 bought before -> 40 @ 40."""
        split = StockSplit(
            symbol="0050", market=StockMarket.TW,
            split_date=date(2025, 6, 18), split_ratio=Decimal("4"),
        )
        buy = make_stock_transaction(ticker="0050", shares="10", price="160", on=date(2024, 1, 15))

        position = calculator.calculate_position_with_split_adjustments("0050", [buy], [split])

        assert position.total_shares == Decimal("40")
        assert position.total_cost_home == Decimal("1600")
        assert position.average_cost_per_share_home == Decimal("40")

    def test_registered_split_ignores_later_trades(self, calculator):
        split = StockSplit(
            symbol="0050", market=StockMarket.TW,
            split_date=date(2025, 6, 18), split_ratio=Decimal("4"),
        )
        buy = make_stock_transaction(ticker="0050", shares="10", price="40", on=date(2025, 6, 18))

        position = calculator.calculate_position_with_split_adjustments("0050", [buy], [split])

        assert position.total_shares == Decimal("10")


# =============================================================================
# MULTI-TICKER
# =============================================================================

class TestRecalculateAllPositions:
    """Tests for recalculating every ticker at once."""

    def test_positions_in_first_seen_order(self, calculator):
        transactions = [
            make_stock_transaction(ticker="MSFT", shares="1", price="10"),
            make_stock_transaction(ticker="AAPL", shares="2", price="10"),
            make_stock_transaction(ticker="MSFT", shares="3", price="10"),
        ]

        positions = calculator.recalculate_all_positions(transactions)

        assert [p.ticker for p in positions] == ["MSFT", "AAPL"]
        assert positions[0].total_shares == Decimal("4")
        assert positions[1].total_shares == Decimal("2")

    def test_deleted_only_ticker_is_omitted(self, calculator):
        transactions = [
            make_stock_transaction(ticker="AAPL", shares="2", price="10"),
            make_stock_transaction(ticker="TSLA", shares="2", price="10", is_deleted=True),
        ]

        positions = calculator.recalculate_all_positions(transactions)

        assert [p.ticker for p in positions] == ["AAPL"]

    def test_split_adjusted_variant(self, calculator):
        split = StockSplit(
            symbol="0050", market=StockMarket.TW,
            split_date=date(2025, 6, 18), split_ratio=Decimal("4"),
        )
        transactions = [
            make_stock_transaction(ticker="0050", shares="10", price="160", on=date(2024, 1, 15)),
            make_stock_transaction(ticker="AAPL", shares="1", price="100", on=date(2024, 1, 15)),
        ]

        positions = calculator.recalculate_all_positions_with_split_adjustments(transactions, [split])

        assert positions[0].total_shares == Decimal("40")
        assert positions[1].total_shares == Decimal("1")


# =============================================================================
# P&L
# =============================================================================

class TestProfitAndLoss:
    """Tests for unrealized and realized P&L."""

    def test_unrealized_pnl(self, calculator):
        position = Position(
            ticker="AAPL",
            total_shares=Decimal("10"),
            total_cost_home=Decimal("30000"),
            average_cost_per_share_home=Decimal("3000"),
        )

        pnl = calculator.calculate_unrealized_pnl(position, Decimal("110"), Decimal("30"))

        assert pnl.current_value_home == Decimal("33000")
        assert pnl.unrealized_pnl_home == Decimal("3000")
        assert pnl.unrealized_pnl_percentage == Decimal("10")

    def test_unrealized_pnl_without_shares_is_zero(self, calculator):
        pnl = calculator.calculate_unrealized_pnl(Position.empty("AAPL"), Decimal("110"), Decimal("30"))

        assert pnl.current_value_home == Decimal("0")
        assert pnl.unrealized_pnl_home == Decimal("0")
        assert pnl.unrealized_pnl_percentage == Decimal("0")

    def test_unrealized_pnl_zero_cost_has_zero_percentage(self, calculator):
        position = Position(ticker="AAPL", total_shares=Decimal("2"))

        pnl = calculator.calculate_unrealized_pnl(position, Decimal("10"), Decimal("1"))

        assert pnl.unrealized_pnl_home == Decimal("20")
        assert pnl.unrealized_pnl_percentage == Decimal("0")

    def test_realized_pnl_taiwan_floors_proceeds(self, calculator):
        """3 × 27.25 = 81.75 -> 81; 81 - 3 × 100 = -219."""
        position = Position(
            ticker="0056", total_shares=Decimal("10"),
            total_cost_home=Decimal("1000"), average_cost_per_share_home=Decimal("100"),
        )
        sell = make_stock_transaction(
            ticker="0056", transaction_type=StockTransactionType.SELL, shares="3", price="27.25",
        )

        assert calculator.calculate_realized_pnl(position, sell) == Decimal("-219")

    def test_realized_pnl_us_keeps_decimals(self, calculator):
        """3 × 27.25 × 30 = 2452.5; 2452.5 - 3 × 3000 = -6547.5."""
        position = Position(
            ticker="AAPL", total_shares=Decimal("10"),
            total_cost_home=Decimal("30000"), average_cost_per_share_home=Decimal("3000"),
        )
        sell = make_stock_transaction(
            transaction_type=StockTransactionType.SELL, shares="3", price="27.25", exchange_rate="30",
        )

        assert calculator.calculate_realized_pnl(position, sell) == Decimal("-6547.5")

    def test_realized_pnl_subtracts_fees(self, calculator):
        position = Position(
            ticker="AAPL", total_shares=Decimal("10"),
            total_cost_home=Decimal("1000"), average_cost_per_share_home=Decimal("100"),
        )
        sell = make_stock_transaction(
            transaction_type=StockTransactionType.SELL, shares="5", price="120", fees="10",
        )

        assert calculator.calculate_realized_pnl(position, sell) == Decimal("90")

    def test_realized_pnl_rejects_buy(self, calculator):
        buy = make_stock_transaction()

        with pytest.raises(InvalidTransactionError):
            calculator.calculate_realized_pnl(Position.empty("AAPL"), buy)
