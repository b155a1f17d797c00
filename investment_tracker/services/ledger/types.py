# investment_tracker/services/ledger/types.py
"""
Data types for foreign-currency cash ledgers.

Architecture:
    - CurrencyTransactionType: closed enumeration of ledger events
    - CashFlowClass: how an event participates in return calculations
    - CurrencyLedger: one cash ledger per currency
    - CurrencyTransaction: one ledger event (validated on construction)
    - LedgerState: replay result (balance, cost basis, realized P&L)
    - derive_amounts: home amount / exchange rate derivation

Amount conventions:
    foreign_amount  always positive, in ledger currency (4 dp)
    home_amount     optional, in home currency (2 dp)
    exchange_rate   optional, 1 foreign = rate home (6 dp)
    home_amount == foreign_amount × exchange_rate when both are known
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_EVEN
from enum import Enum
from uuid import UUID, uuid4

from investment_tracker.services.constants import (
    CURRENCY_PRECISION,
    DEFAULT_HOME_CURRENCY,
    IMPORT_NOTES_MAX_LENGTH,
    RATE_PRECISION,
    SHARE_PRECISION,
    ZERO,
)
from investment_tracker.services.exceptions import InvalidTransactionError

# Foreign amounts carry 4 decimal places, like share quantities
FOREIGN_AMOUNT_PRECISION = SHARE_PRECISION


class CurrencyTransactionType(str, Enum):
    """
    Ledger event types.

    Parsing is case-insensitive and accepts member names as well as values.
    The legacy value ``InitialBalance`` maps to TRANSFER_IN_BALANCE.
    """
    TRANSFER_IN_BALANCE = "TransferInBalance"
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"
    OTHER_INCOME = "OtherIncome"
    OTHER_EXPENSE = "OtherExpense"
    EXCHANGE_BUY = "ExchangeBuy"
    EXCHANGE_SELL = "ExchangeSell"
    INTEREST = "Interest"
    DIVIDEND = "Dividend"
    SPEND = "Spend"
    STOCK_SELL = "StockSell"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = value.strip().replace("_", "").replace(" ", "").lower()
        if key == "initialbalance":
            return cls.TRANSFER_IN_BALANCE
        for member in cls:
            if key in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        return None

    @property
    def is_exchange(self) -> bool:
        return self in (CurrencyTransactionType.EXCHANGE_BUY, CurrencyTransactionType.EXCHANGE_SELL)


class CashFlowClass(str, Enum):
    """
    Return-calculation class of a ledger event.

    Attributes:
        EXTERNAL_INFLOW: Capital entering the tracked system
        EXTERNAL_OUTFLOW: Capital leaving the tracked system
        INTERNAL_REALLOCATION: Stock settlement inside the system
        INTERNAL_RETURN: Interest and dividends earned inside the system
        NOT_ALLOWED: Currency exchange on a home-currency ledger
    """
    EXTERNAL_INFLOW = "external_inflow"
    EXTERNAL_OUTFLOW = "external_outflow"
    INTERNAL_REALLOCATION = "internal_reallocation"
    INTERNAL_RETURN = "internal_return"
    NOT_ALLOWED = "not_allowed"

    @property
    def is_external(self) -> bool:
        return self in (CashFlowClass.EXTERNAL_INFLOW, CashFlowClass.EXTERNAL_OUTFLOW)


def derive_amounts(
        foreign_amount: Decimal,
        home_amount: Decimal | None,
        exchange_rate: Decimal | None,
) -> tuple[Decimal | None, Decimal | None]:
    """
    Fill in whichever of home amount / exchange rate is missing.

    - Only rate known: home = foreign × rate
    - Only home known: rate = home / foreign
    - Both or neither known: returned unchanged

    Returns:
        (home_amount, exchange_rate)
    """
    if home_amount is None and exchange_rate is not None:
        home_amount = foreign_amount * exchange_rate
    elif exchange_rate is None and home_amount is not None and foreign_amount != ZERO:
        exchange_rate = home_amount / foreign_amount
    return home_amount, exchange_rate


# =============================================================================
# LEDGERS AND TRANSACTIONS
# =============================================================================

@dataclass
class CurrencyLedger:
    """
    A cash ledger holding one currency.

    Attributes:
        currency_code: ISO 4217 code of the ledger (upper case)
        home_currency: Household home currency the cost basis is kept in
        is_active: Inactive ledgers are never used for return cash flows
    """
    currency_code: str
    home_currency: str = DEFAULT_HOME_CURRENCY
    id: UUID = field(default_factory=uuid4)
    name: str = ""
    is_active: bool = True

    def __post_init__(self) -> None:
        self.currency_code = self.currency_code.strip().upper()
        self.home_currency = self.home_currency.strip().upper()

    @property
    def is_home_currency(self) -> bool:
        return self.currency_code == self.home_currency


@dataclass
class CurrencyTransaction:
    """
    One ledger event.

    Attributes:
        ledger_id: Owning ledger
        transaction_date: Event date
        transaction_type: Event type
        foreign_amount: Positive amount in ledger currency
        home_amount: Optional amount in home currency
        exchange_rate: Optional rate (1 foreign = rate home)
        related_stock_transaction_id: Stock trade this event settles
        notes: Free text; advisory except for the legacy top-up prefix
        is_internal_settlement: Set by stock linking for settlement effects
    """
    ledger_id: UUID
    transaction_date: date
    transaction_type: CurrencyTransactionType
    foreign_amount: Decimal
    home_amount: Decimal | None = None
    exchange_rate: Decimal | None = None
    related_stock_transaction_id: UUID | None = None
    notes: str | None = None
    is_internal_settlement: bool = False
    created_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)
    is_deleted: bool = False

    def __post_init__(self) -> None:
        self.transaction_type = CurrencyTransactionType(self.transaction_type)

        if self.foreign_amount is None or self.foreign_amount <= 0:
            raise InvalidTransactionError(
                "Foreign amount must be positive", field="foreign_amount"
            )
        if self.home_amount is not None and self.home_amount <= 0:
            raise InvalidTransactionError("Home amount must be positive", field="home_amount")
        if self.exchange_rate is not None and self.exchange_rate <= 0:
            raise InvalidTransactionError("Exchange rate must be positive", field="exchange_rate")

        self.home_amount, self.exchange_rate = derive_amounts(
            self.foreign_amount, self.home_amount, self.exchange_rate
        )

        if self.transaction_type.is_exchange:
            if self.home_amount is None or self.exchange_rate is None:
                raise InvalidTransactionError(
                    "Home amount or exchange rate is required for exchange transactions",
                    field="home_amount",
                )

        self.foreign_amount = self.foreign_amount.quantize(
            FOREIGN_AMOUNT_PRECISION, rounding=ROUND_HALF_EVEN
        )
        if self.home_amount is not None:
            self.home_amount = self.home_amount.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_EVEN)
        if self.exchange_rate is not None:
            self.exchange_rate = self.exchange_rate.quantize(RATE_PRECISION, rounding=ROUND_HALF_EVEN)

        if self.notes is not None:
            self.notes = self.notes.strip()
            if len(self.notes) > IMPORT_NOTES_MAX_LENGTH:
                raise InvalidTransactionError(
                    f"Notes cannot exceed {IMPORT_NOTES_MAX_LENGTH} characters", field="notes"
                )


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class LedgerState:
    """
    Result of replaying a ledger.

    Attributes:
        balance: Foreign balance, may be negative
        total_cost: Home-currency cost of the balance (2 dp, never negative)
        average_cost: Home currency per foreign unit (6 dp, 0 when balance <= 0)
        realized_pnl: Gains realized by ExchangeSell (2 dp)
    """
    balance: Decimal = ZERO
    total_cost: Decimal = ZERO
    average_cost: Decimal = ZERO
    realized_pnl: Decimal = ZERO
