# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Transaction factories (stock trades, ledger events)
- Ledger and portfolio fixtures
- Fake collaborators (rate provider, import repository)
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

import pytest

from investment_tracker.services.ledger.types import (
    CurrencyLedger,
    CurrencyTransaction,
    CurrencyTransactionType,
)
from investment_tracker.services.positions.types import (
    StockTransaction,
    StockTransactionType,
)
from investment_tracker.utils.context import clear_correlation_id


# =============================================================================
# FACTORIES
# =============================================================================

def make_stock_transaction(
        ticker: str = "AAPL",
        transaction_type: StockTransactionType = StockTransactionType.BUY,
        shares: str = "10",
        price: str = "100",
        on: date = date(2024, 1, 15),
        exchange_rate: str | None = None,
        fees: str = "0",
        **kwargs,
) -> StockTransaction:
    """Build a stock transaction from string amounts."""
    return StockTransaction(
        ticker=ticker,
        transaction_type=transaction_type,
        shares=Decimal(shares),
        price_per_share=Decimal(price),
        transaction_date=on,
        exchange_rate=Decimal(exchange_rate) if exchange_rate is not None else None,
        fees=Decimal(fees),
        **kwargs,
    )


def make_currency_transaction(
        ledger: CurrencyLedger,
        transaction_type: CurrencyTransactionType,
        foreign: str,
        home: str | None = None,
        rate: str | None = None,
        on: date = date(2024, 1, 15),
        created_at: datetime | None = None,
        **kwargs,
) -> CurrencyTransaction:
    """Build a ledger event from string amounts."""
    return CurrencyTransaction(
        ledger_id=ledger.id,
        transaction_date=on,
        transaction_type=transaction_type,
        foreign_amount=Decimal(foreign),
        home_amount=Decimal(home) if home is not None else None,
        exchange_rate=Decimal(rate) if rate is not None else None,
        created_at=created_at,
        **kwargs,
    )


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

class RecordingRateProvider:
    """
    Rate callable that records every currency it is asked for.

    Unknown currencies raise KeyError so unexpected lookups fail loudly.
    """

    def __init__(self, rates: dict[str, Decimal]):
        self.rates = rates
        self.calls: list[str] = []

    def __call__(self, currency_code: str) -> Decimal:
        self.calls.append(currency_code)
        return self.rates[currency_code]


class FakeTransactionRepository:
    """
    In-memory CurrencyTransactionRepository.

    Set ``fail_on_commit`` to simulate a persistence failure.
    """

    def __init__(self, fail_on_commit: bool = False):
        self.fail_on_commit = fail_on_commit
        self.pending: list[CurrencyTransaction] = []
        self.committed: list[CurrencyTransaction] = []
        self.add_all_calls = 0
        self.commit_calls = 0
        self.rollback_calls = 0

    def add_all(self, transactions: Iterable[CurrencyTransaction]) -> None:
        self.add_all_calls += 1
        self.pending.extend(transactions)

    def commit(self) -> None:
        self.commit_calls += 1
        if self.fail_on_commit:
            raise RuntimeError("database is locked")
        self.committed.extend(self.pending)
        self.pending = []

    def rollback(self) -> None:
        self.rollback_calls += 1
        self.pending = []


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def usd_ledger() -> CurrencyLedger:
    """A USD ledger in a TWD household."""
    return CurrencyLedger(currency_code="USD", home_currency="TWD", name="USD cash")


@pytest.fixture
def twd_ledger() -> CurrencyLedger:
    """A home-currency ledger."""
    return CurrencyLedger(currency_code="TWD", home_currency="TWD", name="TWD cash")


@pytest.fixture
def repository() -> FakeTransactionRepository:
    return FakeTransactionRepository()


@pytest.fixture(autouse=True)
def reset_correlation_id():
    """Keep correlation IDs from leaking between tests."""
    clear_correlation_id()
    yield
    clear_correlation_id()
