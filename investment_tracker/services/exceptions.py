# investment_tracker/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO transport
or persistence knowledge. Callers are responsible for mapping them onto
whatever surface they expose.

Exception Hierarchy:
    ServiceError (base)
    ├── ArgumentMissingError          (also a TypeError)
    ├── ValidationError               (also a ValueError)
    │   └── InvalidTransactionError
    ├── BusinessRuleError
    │   ├── TransactionTypeNotAllowedError
    │   ├── CurrencyMismatchError
    │   └── InsufficientBalanceError
    ├── FXRateError
    │   └── FXConversionError
    └── CurrencyImportError

Undefined numeric results (XIRR without a sign change, Modified Dietz with a
non-positive denominator, ...) are NOT errors: calculators return None.
"""

from decimal import Decimal


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# ARGUMENT ERRORS
# =============================================================================


class ArgumentMissingError(ServiceError, TypeError):
    """
    Raised when a required collection or callable is None.

    Raised before any computation takes place.

    Attributes:
        argument: Name of the missing argument
    """

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"Argument '{argument}' is required")


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError, ValueError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (invalid amounts, missing
    required fields, etc.), NOT for CSV row diagnostics which are collected
    into an import result instead of raised.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidTransactionError(ValidationError):
    """
    Raised when a stock or currency transaction record is malformed.

    Examples:
    - Buy/Sell with zero or negative shares
    - Exchange transaction missing both home amount and exchange rate
    - Realized P&L requested for a non-sell transaction
    """
    pass


# =============================================================================
# BUSINESS RULE ERRORS
# =============================================================================


class BusinessRuleError(ServiceError):
    """
    Base exception for well-formed requests that violate a business rule.

    Distinct from ArgumentMissingError so callers can surface the rule
    violation to the user instead of treating it as a programming error.
    """
    pass


class TransactionTypeNotAllowedError(BusinessRuleError):
    """
    Raised when a transaction type is not allowed on a ledger.

    Currency exchange types are meaningless on a home-currency ledger.

    Attributes:
        ledger_currency: Currency code of the ledger
        transaction_type: The rejected transaction type
    """

    def __init__(self, ledger_currency: str, transaction_type: str) -> None:
        self.ledger_currency = ledger_currency
        self.transaction_type = transaction_type
        super().__init__(
            f"Transaction type '{transaction_type}' is not allowed "
            f"on a {ledger_currency} home-currency ledger"
        )


class CurrencyMismatchError(BusinessRuleError):
    """
    Raised when a stock transaction's currency differs from the bound ledger.

    Attributes:
        stock_currency: Currency of the stock transaction
        ledger_currency: Currency of the bound ledger
    """

    def __init__(self, stock_currency: str, ledger_currency: str) -> None:
        self.stock_currency = stock_currency
        self.ledger_currency = ledger_currency
        super().__init__(
            f"Stock currency '{stock_currency}' does not match "
            f"bound ledger currency '{ledger_currency}'"
        )


class InsufficientBalanceError(BusinessRuleError):
    """
    Raised in strict mode when a spend exceeds the ledger balance.

    Attributes:
        balance: Ledger balance at validation time
        requested: Amount that was requested
    """

    def __init__(self, balance: Decimal, requested: Decimal) -> None:
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient balance: requested {requested}, available {balance}"
        )


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """
    Base exception for FX rate errors.

    Attributes:
        currency: The currency code being converted (optional)
    """

    def __init__(self, message: str, currency: str | None = None) -> None:
        self.currency = currency
        super().__init__(message)


class FXConversionError(FXRateError):
    """
    Raised when FX rate conversion fails due to invalid parameters.

    Examples:
    - Rate provider returned a zero or negative rate
    - Rate provider returned None

    Attributes:
        reason: Specific reason for conversion failure
    """

    def __init__(self, reason: str, currency: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"FX conversion error: {reason}", currency=currency)


# =============================================================================
# IMPORT ERRORS
# =============================================================================


class CurrencyImportError(ServiceError):
    """
    Raised when a validated import batch could not be committed.

    Row-level problems never raise; they are returned as diagnostics on a
    rejected import result. This error means the repository failed and
    the batch was rolled back.
    """
    pass


__all__ = [
    # Base
    "ServiceError",
    # Arguments
    "ArgumentMissingError",
    # Validation
    "ValidationError",
    "InvalidTransactionError",
    # Business rules
    "BusinessRuleError",
    "TransactionTypeNotAllowedError",
    "CurrencyMismatchError",
    "InsufficientBalanceError",
    # FX Rate
    "FXRateError",
    "FXConversionError",
    # Import
    "CurrencyImportError",
]
