# investment_tracker/services/returns/cash_flows.py
"""
Return cash-flow strategies.

A strategy extracts the external cash flows of a portfolio for a period.
Two exist:

- CurrencyLedgerCashFlowStrategy: the bound ledger is the boundary of the
  closed-loop system. Only explicit external ledger events count; stock
  settlement, interest and dividends stay inside.
- StockTransactionCashFlowStrategy: fallback when no active ledger is
  bound. Stock buys and sells are internal reallocations in the closed-loop
  model, so it emits nothing.

ReturnCashFlowStrategyProvider picks the ledger strategy whenever the bound
ledger is present and active.
"""

import logging
from datetime import date
from typing import Protocol, Sequence

from investment_tracker.services.ledger import policy
from investment_tracker.services.ledger.service import ordered_active
from investment_tracker.services.ledger.types import CurrencyLedger, CurrencyTransaction
from investment_tracker.services.positions.types import StockTransaction
from investment_tracker.services.returns.types import (
    CashFlowEventSource,
    Portfolio,
    ReturnCashFlowEvent,
)

logger = logging.getLogger(__name__)


class ReturnCashFlowStrategy(Protocol):
    """Interface shared by cash-flow strategies."""

    @property
    def name(self) -> str:
        ...

    def is_applicable(
            self,
            portfolio: Portfolio,
            stock_transactions: Sequence[StockTransaction],
            ledgers: Sequence[CurrencyLedger],
    ) -> bool:
        ...

    def get_cash_flow_events(
            self,
            portfolio: Portfolio,
            from_date: date,
            to_date: date,
            stock_transactions: Sequence[StockTransaction],
            ledgers: Sequence[CurrencyLedger],
            currency_transactions: Sequence[CurrencyTransaction],
    ) -> list[ReturnCashFlowEvent]:
        ...


# =============================================================================
# STOCK TRANSACTION STRATEGY
# =============================================================================

class StockTransactionCashFlowStrategy:
    """Always applicable; emits no events in the closed-loop model."""

    name = "StockTransaction"

    def is_applicable(self, portfolio, stock_transactions, ledgers) -> bool:
        return True

    def get_cash_flow_events(
            self,
            portfolio: Portfolio,
            from_date: date,
            to_date: date,
            stock_transactions: Sequence[StockTransaction],
            ledgers: Sequence[CurrencyLedger],
            currency_transactions: Sequence[CurrencyTransaction],
    ) -> list[ReturnCashFlowEvent]:
        return []


# =============================================================================
# CURRENCY LEDGER STRATEGY
# =============================================================================

class CurrencyLedgerCashFlowStrategy:
    """Explicit external events of the portfolio's bound ledger."""

    name = "CurrencyLedger"

    def is_applicable(self, portfolio, stock_transactions, ledgers) -> bool:
        return any(
            ledger.id == portfolio.bound_ledger_id and ledger.is_active
            for ledger in ledgers
        )

    def get_cash_flow_events(
            self,
            portfolio: Portfolio,
            from_date: date,
            to_date: date,
            stock_transactions: Sequence[StockTransaction],
            ledgers: Sequence[CurrencyLedger],
            currency_transactions: Sequence[CurrencyTransaction],
    ) -> list[ReturnCashFlowEvent]:
        """
        Events in ``[from_date, to_date]``, ordered by date then creation time.

        Amounts are signed (Withdraw, OtherExpense and ExchangeSell negative)
        and reported in the bound ledger's currency, falling back to the
        portfolio base currency when the ledger is missing.
        """
        bound_ledger = next(
            (ledger for ledger in ledgers if ledger.id == portfolio.bound_ledger_id), None
        )
        currency_code = bound_ledger.currency_code if bound_ledger else portfolio.base_currency

        events = []
        for transaction in ordered_active(currency_transactions):
            if transaction.ledger_id != portfolio.bound_ledger_id:
                continue
            if not from_date <= transaction.transaction_date <= to_date:
                continue
            if not policy.is_explicit_external_cash_flow(
                    transaction, currency_code, portfolio.home_currency
            ):
                continue

            events.append(ReturnCashFlowEvent(
                portfolio_id=portfolio.id,
                transaction_id=transaction.id,
                transaction_date=transaction.transaction_date,
                amount=policy.signed_amount(transaction),
                currency_code=currency_code,
                source=CashFlowEventSource.CURRENCY_LEDGER,
            ))

        logger.debug(
            f"Portfolio {portfolio.id}: {len(events)} external ledger cash flows "
            f"between {from_date} and {to_date}"
        )
        return events


# =============================================================================
# PROVIDER
# =============================================================================

class ReturnCashFlowStrategyProvider:
    """Chooses the cash-flow strategy for a portfolio."""

    def __init__(
            self,
            stock_strategy: StockTransactionCashFlowStrategy | None = None,
            ledger_strategy: CurrencyLedgerCashFlowStrategy | None = None,
    ) -> None:
        self.stock_strategy = stock_strategy or StockTransactionCashFlowStrategy()
        self.ledger_strategy = ledger_strategy or CurrencyLedgerCashFlowStrategy()

    def get_strategy(
            self,
            portfolio: Portfolio,
            stock_transactions: Sequence[StockTransaction],
            ledgers: Sequence[CurrencyLedger],
            currency_transactions: Sequence[CurrencyTransaction] = (),
    ) -> ReturnCashFlowStrategy:
        if self.ledger_strategy.is_applicable(portfolio, stock_transactions, ledgers):
            return self.ledger_strategy
        return self.stock_strategy
