# investment_tracker/services/assets/types.py
"""
Data types for bank assets, liabilities and summaries.

Architecture:
    - FixedDepositStatus / FixedDepositInfo: time-deposit metadata
    - BankAccount: savings or fixed-deposit account
    - Installment: credit-card installment liability
    - LedgerBalance: a currency ledger balance (may be negative)
    - InterestEstimate / AvailableFundsSummary / TotalAssetsSummary: results
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from investment_tracker.services.constants import (
    CURRENCY_PRECISION,
    DEFAULT_HOME_CURRENCY,
    ZERO,
)
from investment_tracker.services.exceptions import ValidationError

# Interest rates are stored as percentages with 4 decimal places
INTEREST_RATE_PRECISION = Decimal("0.0001")

MAX_BANK_NAME_LENGTH = 100


class FixedDepositStatus(str, Enum):
    ACTIVE = "Active"
    MATURED = "Matured"
    CLOSED = "Closed"
    EARLY_WITHDRAWAL = "EarlyWithdrawal"


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass
class FixedDepositInfo:
    """
    Fixed-deposit metadata attached to a bank account.

    Attributes:
        term_months: Deposit term
        start_date: Deposit date
        status: Lifecycle status
        expected_interest: Interest due at maturity
        actual_interest: Interest actually paid (closed deposits)
    """
    term_months: int
    start_date: date
    status: FixedDepositStatus = FixedDepositStatus.ACTIVE
    expected_interest: Decimal = ZERO
    actual_interest: Decimal | None = None

    def __post_init__(self) -> None:
        if self.term_months <= 0:
            raise ValidationError("Term must be at least one month", field="term_months")
        if self.expected_interest < 0:
            raise ValidationError("Expected interest cannot be negative", field="expected_interest")
        self.status = FixedDepositStatus(self.status)

    @property
    def maturity_date(self) -> date:
        return add_months(self.start_date, self.term_months)

    def is_matured(self, as_of: date | None = None) -> bool:
        """
        Matured by explicit status, or still ACTIVE past the maturity date.

        Closed and early-withdrawn deposits are settled and never mature.
        """
        if self.status == FixedDepositStatus.MATURED:
            return True
        if self.status == FixedDepositStatus.ACTIVE:
            return self.maturity_date <= (as_of or date.today())
        return False


@dataclass
class BankAccount:
    """
    A bank account.

    For a fixed deposit, ``total_assets`` is the principal.

    Attributes:
        interest_rate: Annual rate in percent (1.5 = 1.5%)
        interest_cap: Maximum balance that earns interest
        currency: ISO 4217 code of the account
    """
    bank_name: str
    total_assets: Decimal = ZERO
    interest_rate: Decimal = ZERO
    interest_cap: Decimal = ZERO
    currency: str = DEFAULT_HOME_CURRENCY
    fixed_deposit: FixedDepositInfo | None = None

    def __post_init__(self) -> None:
        if not self.bank_name or not self.bank_name.strip():
            raise ValidationError("Bank name is required", field="bank_name")
        if len(self.bank_name) > MAX_BANK_NAME_LENGTH:
            raise ValidationError(
                f"Bank name cannot exceed {MAX_BANK_NAME_LENGTH} characters", field="bank_name"
            )
        if self.total_assets < 0:
            raise ValidationError("Total assets cannot be negative", field="total_assets")
        if self.interest_rate < 0:
            raise ValidationError("Interest rate cannot be negative", field="interest_rate")
        if self.interest_cap < 0:
            raise ValidationError("Interest cap cannot be negative", field="interest_cap")

        currency = (self.currency or "").strip()
        if len(currency) != 3:
            raise ValidationError("Currency code must be a 3-letter ISO code", field="currency")

        self.bank_name = self.bank_name.strip()
        self.currency = currency.upper()
        self.total_assets = self.total_assets.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)
        self.interest_rate = self.interest_rate.quantize(INTEREST_RATE_PRECISION, rounding=ROUND_HALF_UP)
        self.interest_cap = self.interest_cap.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

    @property
    def is_fixed_deposit(self) -> bool:
        return self.fixed_deposit is not None


@dataclass
class Installment:
    """
    An installment purchase still being repaid.

    Attributes:
        total_amount: Total purchase amount (home currency)
        number_of_installments: Total number of payments
        remaining_installments: Payments not yet made
        is_cancelled: Cancelled plans carry no liability
    """
    total_amount: Decimal
    number_of_installments: int
    remaining_installments: int
    is_cancelled: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        if self.number_of_installments <= 0:
            raise ValidationError(
                "Number of installments must be positive", field="number_of_installments"
            )
        if not 0 <= self.remaining_installments <= self.number_of_installments:
            raise ValidationError(
                "Remaining installments must be between 0 and the number of installments",
                field="remaining_installments",
            )
        if self.total_amount < 0:
            raise ValidationError("Total amount cannot be negative", field="total_amount")

    @property
    def monthly_payment(self) -> Decimal:
        return self.total_amount / self.number_of_installments

    @property
    def unpaid_balance(self) -> Decimal:
        return self.monthly_payment * self.remaining_installments

    @property
    def is_active(self) -> bool:
        return not self.is_cancelled and self.remaining_installments > 0


@dataclass
class LedgerBalance:
    """Current balance of a currency ledger; negative balances are kept as-is."""
    balance: Decimal
    currency: str


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class InterestEstimate:
    monthly_interest: Decimal
    yearly_interest: Decimal


@dataclass
class AvailableFundsSummary:
    """
    Cash the household can deploy, in home currency.

    Attributes:
        total_bank_assets: Ledgers + bank accounts + matured deposit interest
        fixed_deposits_principal: Principal + interest of matured deposits
        unpaid_installment_balance: Outstanding installment liability
        available_funds: total_bank_assets - unpaid_installment_balance
    """
    total_bank_assets: Decimal
    fixed_deposits_principal: Decimal
    unpaid_installment_balance: Decimal
    available_funds: Decimal


@dataclass
class TotalAssetsSummary:
    investment_total: Decimal
    bank_total: Decimal
    grand_total: Decimal
    investment_percentage: Decimal
    bank_percentage: Decimal
    total_monthly_interest: Decimal
    total_yearly_interest: Decimal
