# investment_tracker/services/ledger/policy.py
"""
Currency transaction classification policy.

Single source of truth for how a ledger event type behaves on a ledger.
Manual entry, CSV import, stock auto-linking and return cash-flow
derivation all call into this module, so there is no second allow/deny
matrix to drift from this one.

Classification table:

    Type               non-home ledger          home-currency ledger
    -----------------  -----------------------  -----------------------
    TransferInBalance  external inflow          external inflow
    Deposit            external inflow          external inflow
    OtherIncome        external inflow          external inflow
    Withdraw           external outflow         external outflow
    OtherExpense       external outflow         external outflow
    ExchangeBuy        external inflow          not allowed
    ExchangeSell       external outflow         not allowed
    Interest           internal return          internal return
    Dividend           internal return          internal return
    Spend              internal reallocation    internal reallocation
    StockSell          internal reallocation    internal reallocation
"""

from dataclasses import dataclass, field
from decimal import Decimal

from investment_tracker.config import settings
from investment_tracker.services.constants import STOCK_TOP_UP_NOTE_PREFIX
from investment_tracker.services.exceptions import (
    TransactionTypeNotAllowedError,
    ValidationError,
)
from investment_tracker.services.ledger.types import (
    CashFlowClass,
    CurrencyTransaction,
    CurrencyTransactionType,
)

# =============================================================================
# ERROR CODES AND FIELD NAMES
# =============================================================================

INVALID_TRANSACTION_TYPE_FOR_LEDGER = "INVALID_TRANSACTION_TYPE_FOR_LEDGER"
REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"

# Client-facing field names ("amount" is the foreign amount,
# "targetAmount" is the home amount)
FIELD_TRANSACTION_TYPE = "transactionType"
FIELD_AMOUNT = "amount"
FIELD_TARGET_AMOUNT = "targetAmount"

_OUTFLOW_TYPES = frozenset({
    CurrencyTransactionType.WITHDRAW,
    CurrencyTransactionType.OTHER_EXPENSE,
    CurrencyTransactionType.EXCHANGE_SELL,
})


# =============================================================================
# POLICY TYPES
# =============================================================================

@dataclass(frozen=True)
class AmountPresence:
    """Which amounts the caller supplied."""
    has_amount: bool
    has_target_amount: bool


@dataclass(frozen=True)
class AmountRequirement:
    """Which amounts a transaction type requires."""
    requires_amount: bool
    requires_target_amount: bool


@dataclass(frozen=True)
class PolicyDiagnostic:
    """
    One policy violation, shaped for API and import responses.

    Attributes:
        error_code: Stable machine-readable code
        field_name: Client-facing field name
        message: What is wrong
        correction_guidance: How to fix it
        invalid_value: The rejected value, when there is one
    """
    error_code: str
    field_name: str
    message: str
    correction_guidance: str
    invalid_value: str | None = None


@dataclass
class PolicyValidationResult:
    is_valid: bool
    diagnostics: list[PolicyDiagnostic] = field(default_factory=list)


# =============================================================================
# CLASSIFICATION
# =============================================================================

def _is_home_ledger(ledger_currency: str, home_currency: str | None) -> bool:
    home = (home_currency or settings.home_currency).strip().upper()
    return ledger_currency.strip().upper() == home


def classify(
        transaction_type: CurrencyTransactionType,
        ledger_currency: str,
        home_currency: str | None = None,
) -> CashFlowClass:
    """
    Classify a transaction type on a ledger.

    Args:
        transaction_type: Event type
        ledger_currency: Currency of the ledger holding the event
        home_currency: Household home currency (defaults to settings)

    Returns:
        CashFlowClass of the event
    """
    home_ledger = _is_home_ledger(ledger_currency, home_currency)

    match CurrencyTransactionType(transaction_type):
        case (
            CurrencyTransactionType.TRANSFER_IN_BALANCE
            | CurrencyTransactionType.DEPOSIT
            | CurrencyTransactionType.OTHER_INCOME
        ):
            return CashFlowClass.EXTERNAL_INFLOW
        case CurrencyTransactionType.WITHDRAW | CurrencyTransactionType.OTHER_EXPENSE:
            return CashFlowClass.EXTERNAL_OUTFLOW
        case CurrencyTransactionType.EXCHANGE_BUY:
            return CashFlowClass.NOT_ALLOWED if home_ledger else CashFlowClass.EXTERNAL_INFLOW
        case CurrencyTransactionType.EXCHANGE_SELL:
            return CashFlowClass.NOT_ALLOWED if home_ledger else CashFlowClass.EXTERNAL_OUTFLOW
        case CurrencyTransactionType.INTEREST | CurrencyTransactionType.DIVIDEND:
            return CashFlowClass.INTERNAL_RETURN
        case CurrencyTransactionType.SPEND | CurrencyTransactionType.STOCK_SELL:
            return CashFlowClass.INTERNAL_REALLOCATION

    raise ValueError(f"Unclassified transaction type: {transaction_type}")


def is_allowed_for_ledger_currency(
        ledger_currency: str,
        transaction_type: CurrencyTransactionType,
        home_currency: str | None = None,
) -> bool:
    """Currency exchange is the only thing a home-currency ledger forbids."""
    return classify(transaction_type, ledger_currency, home_currency) != CashFlowClass.NOT_ALLOWED


def get_amount_requirement(transaction_type: CurrencyTransactionType) -> AmountRequirement:
    """Every type needs a foreign amount; exchange types also need the home amount."""
    if CurrencyTransactionType(transaction_type).is_exchange:
        return AmountRequirement(requires_amount=True, requires_target_amount=True)
    return AmountRequirement(requires_amount=True, requires_target_amount=False)


# =============================================================================
# VALIDATION
# =============================================================================

def validate(
        ledger_currency: str,
        transaction_type: CurrencyTransactionType | str,
        amount_presence: AmountPresence | None = None,
        home_currency: str | None = None,
) -> PolicyValidationResult:
    """
    Validate a ledger-currency / transaction-type combination.

    Amount presence is only checked when supplied (import flow).
    All violations are reported, not just the first.
    """
    try:
        parsed_type = CurrencyTransactionType(transaction_type)
    except ValueError:
        return PolicyValidationResult(
            is_valid=False,
            diagnostics=[PolicyDiagnostic(
                error_code=INVALID_TRANSACTION_TYPE_FOR_LEDGER,
                field_name=FIELD_TRANSACTION_TYPE,
                message="Transaction type is not valid for this ledger",
                correction_guidance="Use one of the defined transaction types.",
                invalid_value=str(transaction_type),
            )],
        )

    diagnostics: list[PolicyDiagnostic] = []

    if not is_allowed_for_ledger_currency(ledger_currency, parsed_type, home_currency):
        diagnostics.append(PolicyDiagnostic(
            error_code=INVALID_TRANSACTION_TYPE_FOR_LEDGER,
            field_name=FIELD_TRANSACTION_TYPE,
            message="Transaction type is not valid for this ledger",
            correction_guidance=(
                f"{ledger_currency.upper()} ledgers cannot use ExchangeBuy/ExchangeSell; "
                "use a type allowed on this ledger."
            ),
            invalid_value=parsed_type.value,
        ))

    if amount_presence is not None:
        requirement = get_amount_requirement(parsed_type)

        if requirement.requires_amount and not amount_presence.has_amount:
            diagnostics.append(PolicyDiagnostic(
                error_code=REQUIRED_FIELD_MISSING,
                field_name=FIELD_AMOUNT,
                message="This transaction type requires amount",
                correction_guidance="Enter an amount greater than 0.",
            ))

        if requirement.requires_target_amount and not amount_presence.has_target_amount:
            diagnostics.append(PolicyDiagnostic(
                error_code=REQUIRED_FIELD_MISSING,
                field_name=FIELD_TARGET_AMOUNT,
                message="This transaction type requires targetAmount",
                correction_guidance="Enter targetAmount (maps to homeAmount on manual entry).",
            ))

    return PolicyValidationResult(is_valid=not diagnostics, diagnostics=diagnostics)


def ensure_valid(
        ledger_currency: str,
        transaction_type: CurrencyTransactionType | str,
        amount_presence: AmountPresence | None = None,
        home_currency: str | None = None,
) -> None:
    """
    Raise on the first policy violation (manual entry and stock linking).

    Raises:
        TransactionTypeNotAllowedError: Type forbidden on this ledger
        ValidationError: Undefined type or missing required amount
    """
    result = validate(ledger_currency, transaction_type, amount_presence, home_currency)
    if result.is_valid:
        return

    first = result.diagnostics[0]
    if first.error_code == INVALID_TRANSACTION_TYPE_FOR_LEDGER and first.field_name == FIELD_TRANSACTION_TYPE:
        try:
            parsed_type = CurrencyTransactionType(transaction_type)
        except ValueError:
            raise ValidationError(
                f"{first.message}. {first.correction_guidance}", field=first.field_name
            ) from None
        raise TransactionTypeNotAllowedError(ledger_currency.upper(), parsed_type.value)

    raise ValidationError(f"{first.message}. {first.correction_guidance}", field=first.field_name)


# =============================================================================
# CASH FLOW ELIGIBILITY
# =============================================================================

def is_stock_top_up(transaction: CurrencyTransaction) -> bool:
    """Legacy marker: linked top-ups carry the top-up prefix in their notes."""
    notes = transaction.notes
    return notes is not None and notes.strip().startswith(STOCK_TOP_UP_NOTE_PREFIX)


def is_internal_settlement_effect(transaction: CurrencyTransaction) -> bool:
    """
    True when an event only settles an internal stock trade.

    The explicit ``is_internal_settlement`` flag decides for records created
    by stock linking. Older records only carry the stock link, so for those
    linked Spend/StockSell are internal, and linked OtherIncome and exchange
    events are internal unless their notes start with the top-up prefix.
    """
    if transaction.is_internal_settlement:
        return True

    if transaction.related_stock_transaction_id is None:
        return False

    transaction_type = transaction.transaction_type
    if transaction_type in (CurrencyTransactionType.SPEND, CurrencyTransactionType.STOCK_SELL):
        return True

    if transaction_type in (
            CurrencyTransactionType.OTHER_INCOME,
            CurrencyTransactionType.EXCHANGE_BUY,
            CurrencyTransactionType.EXCHANGE_SELL,
    ):
        return not is_stock_top_up(transaction)

    return False


def is_explicit_external_cash_flow(
        transaction: CurrencyTransaction,
        ledger_currency: str,
        home_currency: str | None = None,
) -> bool:
    """Whether an event crosses the boundary of the tracked system."""
    if is_internal_settlement_effect(transaction):
        return False
    return classify(transaction.transaction_type, ledger_currency, home_currency).is_external


def signed_amount(transaction: CurrencyTransaction) -> Decimal:
    """Foreign amount, negated for Withdraw, OtherExpense and ExchangeSell."""
    if transaction.transaction_type in _OUTFLOW_TYPES:
        return -transaction.foreign_amount
    return transaction.foreign_amount
