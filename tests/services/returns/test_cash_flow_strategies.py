# tests/services/returns/test_cash_flow_strategies.py
"""
Unit tests for return cash-flow strategies.

Test Coverage:
- Provider selection (bound active ledger vs fallback)
- Ledger strategy: external events only, signed amounts, date window
- Stock strategy: closed-loop model emits nothing
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import make_currency_transaction, make_stock_transaction
from investment_tracker.services.ledger import CurrencyLedger, CurrencyTransactionType as T
from investment_tracker.services.returns import (
    CashFlowEventSource,
    CurrencyLedgerCashFlowStrategy,
    Portfolio,
    ReturnCashFlowStrategyProvider,
    StockTransactionCashFlowStrategy,
    to_return_cash_flows,
)


@pytest.fixture
def portfolio(usd_ledger) -> Portfolio:
    return Portfolio(bound_ledger_id=usd_ledger.id, base_currency="USD", home_currency="TWD")


class TestStrategyProvider:
    """Tests for ReturnCashFlowStrategyProvider.get_strategy."""

    def test_bound_active_ledger_selects_ledger_strategy(self, portfolio, usd_ledger):
        strategy = ReturnCashFlowStrategyProvider().get_strategy(portfolio, [], [usd_ledger])

        assert strategy.name == "CurrencyLedger"

    def test_inactive_ledger_falls_back(self, portfolio, usd_ledger):
        usd_ledger.is_active = False

        strategy = ReturnCashFlowStrategyProvider().get_strategy(portfolio, [], [usd_ledger])

        assert strategy.name == "StockTransaction"

    def test_unbound_portfolio_falls_back(self, usd_ledger):
        strategy = ReturnCashFlowStrategyProvider().get_strategy(Portfolio(), [], [usd_ledger])

        assert isinstance(strategy, StockTransactionCashFlowStrategy)

    def test_missing_ledger_falls_back(self, portfolio):
        other = CurrencyLedger(currency_code="JPY")

        strategy = ReturnCashFlowStrategyProvider().get_strategy(portfolio, [], [other])

        assert strategy.name == "StockTransaction"


class TestCurrencyLedgerStrategy:
    """Tests for CurrencyLedgerCashFlowStrategy.get_cash_flow_events."""

    def test_only_external_events_are_emitted(self, portfolio, usd_ledger):
        deposit = make_currency_transaction(usd_ledger, T.DEPOSIT, "1000", home="31000", on=date(2024, 1, 5))
        transactions = [
            deposit,
            make_currency_transaction(usd_ledger, T.INTEREST, "3", on=date(2024, 1, 31)),
            make_currency_transaction(usd_ledger, T.SPEND, "500", on=date(2024, 2, 1), is_internal_settlement=True),
            make_currency_transaction(usd_ledger, T.STOCK_SELL, "300", on=date(2024, 3, 1)),
            make_currency_transaction(usd_ledger, T.DIVIDEND, "10", on=date(2024, 3, 15)),
            make_currency_transaction(usd_ledger, T.WITHDRAW, "200", on=date(2024, 4, 1)),
        ]

        events = CurrencyLedgerCashFlowStrategy().get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 12, 31), [], [usd_ledger], transactions,
        )

        assert [(e.transaction_date, e.amount) for e in events] == [
            (date(2024, 1, 5), Decimal("1000")),
            (date(2024, 4, 1), Decimal("-200")),
        ]
        assert events[0].transaction_id == deposit.id
        assert events[0].currency_code == "USD"
        assert events[0].source == CashFlowEventSource.CURRENCY_LEDGER
        assert events[0].portfolio_id == portfolio.id

    def test_stock_settlement_does_not_create_flows(self, portfolio, usd_ledger):
        buy = make_stock_transaction(shares="1", price="100")
        transactions = [
            make_currency_transaction(
                usd_ledger, T.SPEND, "100", related_stock_transaction_id=buy.id,
            ),
            make_currency_transaction(
                usd_ledger, T.OTHER_INCOME, "5", related_stock_transaction_id=buy.id,
            ),
        ]

        events = CurrencyLedgerCashFlowStrategy().get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 12, 31), [buy], [usd_ledger], transactions,
        )

        assert events == []

    def test_window_is_inclusive(self, portfolio, usd_ledger):
        transactions = [
            make_currency_transaction(usd_ledger, T.DEPOSIT, "1", on=date(2023, 12, 31)),
            make_currency_transaction(usd_ledger, T.DEPOSIT, "2", on=date(2024, 1, 1)),
            make_currency_transaction(usd_ledger, T.DEPOSIT, "3", on=date(2024, 6, 30)),
            make_currency_transaction(usd_ledger, T.DEPOSIT, "4", on=date(2024, 7, 1)),
        ]

        events = CurrencyLedgerCashFlowStrategy().get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 6, 30), [], [usd_ledger], transactions,
        )

        assert [e.amount for e in events] == [Decimal("2"), Decimal("3")]

    def test_other_ledgers_and_deleted_records_ignored(self, portfolio, usd_ledger):
        other = CurrencyLedger(currency_code="JPY")
        transactions = [
            make_currency_transaction(other, T.DEPOSIT, "1000"),
            make_currency_transaction(usd_ledger, T.DEPOSIT, "50", is_deleted=True),
        ]

        events = CurrencyLedgerCashFlowStrategy().get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 12, 31), [], [usd_ledger, other], transactions,
        )

        assert events == []

    def test_events_ordered_by_date_then_creation(self, portfolio, usd_ledger):
        day = date(2024, 2, 1)
        later = make_currency_transaction(usd_ledger, T.DEPOSIT, "2", on=day, created_at=datetime(2024, 2, 1, 15))
        earlier = make_currency_transaction(usd_ledger, T.DEPOSIT, "1", on=day, created_at=datetime(2024, 2, 1, 8))

        events = CurrencyLedgerCashFlowStrategy().get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 12, 31), [], [usd_ledger], [later, earlier],
        )

        assert [e.amount for e in events] == [Decimal("1"), Decimal("2")]

    def test_events_convert_to_dietz_input(self, portfolio, usd_ledger):
        transactions = [make_currency_transaction(usd_ledger, T.WITHDRAW, "75", on=date(2024, 5, 1))]

        events = CurrencyLedgerCashFlowStrategy().get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 12, 31), [], [usd_ledger], transactions,
        )
        flows = to_return_cash_flows(events)

        assert flows[0].date == date(2024, 5, 1)
        assert flows[0].amount == Decimal("-75")


class TestStockTransactionStrategy:
    """Tests for StockTransactionCashFlowStrategy."""

    def test_always_applicable_and_empty(self):
        strategy = StockTransactionCashFlowStrategy()
        buys = [make_stock_transaction()]
        portfolio = Portfolio(bound_ledger_id=uuid4())

        assert strategy.is_applicable(portfolio, buys, []) is True
        assert strategy.get_cash_flow_events(
            portfolio, date(2024, 1, 1), date(2024, 12, 31), buys, [], [],
        ) == []
