# investment_tracker/services/returns/__init__.py
"""
Returns Package.

This package provides portfolio performance calculations:
- External cash-flow extraction (closed-loop ledger model)
- Modified Dietz and Time-Weighted Return over a supplied valuation baseline
- XIRR (money-weighted annual return)

Architecture:
    returns/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Portfolio, events, flows and snapshots
    ├── cash_flows.py            # Cash-flow strategies and provider
    ├── calculator.py            # ReturnCalculator (MD, TWR, simple)
    └── xirr.py                  # XIRR solver

Usage:
    from investment_tracker.services.returns import (
        ReturnCalculator,
        ReturnCashFlowStrategyProvider,
        to_return_cash_flows,
    )

    strategy = ReturnCashFlowStrategyProvider().get_strategy(portfolio, stock_txs, ledgers)
    events = strategy.get_cash_flow_events(
        portfolio, date(2024, 1, 1), date(2024, 12, 31), stock_txs, ledgers, currency_txs
    )
    dietz = ReturnCalculator().calculate_modified_dietz(
        start_value, end_value, date(2024, 1, 1), date(2024, 12, 31),
        to_return_cash_flows(events),
    )

Data Flow:
    CurrencyTransaction records
        ↓
    ReturnCashFlowStrategy (policy-driven filter)
        ↓
    ReturnCashFlowEvent list
        ↓
    ReturnCalculator / calculate_xirr
"""

from investment_tracker.services.returns.calculator import ReturnCalculator, to_return_cash_flows
from investment_tracker.services.returns.cash_flows import (
    CurrencyLedgerCashFlowStrategy,
    ReturnCashFlowStrategy,
    ReturnCashFlowStrategyProvider,
    StockTransactionCashFlowStrategy,
)
from investment_tracker.services.returns.types import (
    CashFlow,
    CashFlowEventSource,
    Portfolio,
    ReturnCashFlow,
    ReturnCashFlowEvent,
    ValuationSnapshot,
)
from investment_tracker.services.returns.xirr import XirrCalculator, calculate_xirr

__all__ = [
    # Calculators
    "ReturnCalculator",
    "XirrCalculator",
    "calculate_xirr",
    "to_return_cash_flows",
    # Strategies
    "ReturnCashFlowStrategy",
    "ReturnCashFlowStrategyProvider",
    "CurrencyLedgerCashFlowStrategy",
    "StockTransactionCashFlowStrategy",
    # Types
    "CashFlow",
    "CashFlowEventSource",
    "Portfolio",
    "ReturnCashFlow",
    "ReturnCashFlowEvent",
    "ValuationSnapshot",
]
