# investment_tracker/services/returns/types.py
"""
Data types for return calculations.

All values use Decimal for financial precision.

Architecture:
    - Portfolio: the owner of a return calculation and its bound ledger
    - ReturnCashFlowEvent: an external cash flow extracted by a strategy
    - ReturnCashFlow: dated flow for Modified Dietz
    - ValuationSnapshot: valuation around a flow, for TWR sub-periods
    - CashFlow: dated flow for XIRR
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from investment_tracker.services.constants import DEFAULT_FOREIGN_STOCK_CURRENCY, DEFAULT_HOME_CURRENCY


class CashFlowEventSource(str, Enum):
    """Which record family an event was derived from."""
    STOCK_TRANSACTION = "stock_transaction"
    CURRENCY_LEDGER = "currency_ledger"


@dataclass
class Portfolio:
    """
    A stock portfolio.

    Attributes:
        bound_ledger_id: Currency ledger that funds the portfolio (closed loop)
        base_currency: Currency of the holdings, used when no ledger is bound
        home_currency: Household home currency
    """
    bound_ledger_id: UUID | None = None
    base_currency: str = DEFAULT_FOREIGN_STOCK_CURRENCY
    home_currency: str = DEFAULT_HOME_CURRENCY
    id: UUID = field(default_factory=uuid4)


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass
class ReturnCashFlowEvent:
    """
    External cash flow extracted from a portfolio's records.

    Attributes:
        amount: Positive = capital in, negative = capital out
        currency_code: Currency of ``amount``
        source: Record family the event came from
    """
    portfolio_id: UUID
    transaction_id: UUID
    transaction_date: date
    amount: Decimal
    currency_code: str
    source: CashFlowEventSource
    is_explicit_external: bool = True


@dataclass
class ReturnCashFlow:
    """
    A dated flow for Modified Dietz.

    Attributes:
        date: When the flow occurred
        amount: Positive = contribution, negative = withdrawal
    """
    date: date
    amount: Decimal


@dataclass
class ValuationSnapshot:
    """
    Portfolio value immediately before and after a cash flow.

    Consecutive snapshots bound the TWR sub-periods.
    """
    date: date
    value_before: Decimal
    value_after: Decimal


@dataclass
class CashFlow:
    """
    Represents a cash flow event for XIRR calculations.

    Attributes:
        date: When the cash flow occurred
        amount: Negative = money invested, positive = money returned

    Note:
        The final portfolio value enters XIRR as a positive flow on the
        valuation date.
    """
    date: date
    amount: Decimal
