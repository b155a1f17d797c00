# investment_tracker/services/__init__.py
"""
Service layer for portfolio and ledger calculations.

This package contains the calculation core of the Investment Tracker.
Services:
- Have NO knowledge of HTTP, persistence or market-data providers
- Operate on in-memory collections supplied by the caller
- Raise domain-specific exceptions (see exceptions.py)
- Return None for undefined numeric results instead of raising

Usage:
    from investment_tracker.services.positions import PositionCalculator
    from investment_tracker.services.ledger import CurrencyLedgerService
    from investment_tracker.services.returns import ReturnCalculator, calculate_xirr
    from investment_tracker.services.assets import AvailableFundsService
    from investment_tracker.services.imports import CurrencyTransactionImportService
    from investment_tracker.services import (
        ValidationError,
        TransactionTypeNotAllowedError,
        FXConversionError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - exception exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and precisions
    ├── protocols.py                 # Collaborator interfaces (Protocol classes)
    ├── positions/                   # Stock positions
    │   ├── types.py                 # Stock transactions, splits, positions
    │   ├── splits.py                # Split adjustment service
    │   └── calculator.py            # Moving-average position calculator
    ├── ledger/                      # Foreign-currency cash ledgers
    │   ├── types.py                 # Ledger events and replay state
    │   ├── policy.py                # Classification and validation policy
    │   ├── service.py               # Balance, cost basis, realized P&L
    │   └── linking.py               # Stock trade -> ledger settlement
    ├── returns/                     # Performance measurement
    │   ├── types.py                 # Portfolios, cash flows, snapshots
    │   ├── cash_flows.py            # Return cash-flow strategies
    │   ├── calculator.py            # Simple return, Modified Dietz, TWR
    │   └── xirr.py                  # XIRR solver
    ├── assets/                      # Household assets
    │   ├── types.py                 # Accounts, deposits, installments
    │   ├── interest.py              # Interest estimation
    │   ├── available_funds.py       # Available funds aggregation
    │   └── total_assets.py          # Total assets summary
    └── imports/                     # Bulk entry
        ├── csv_reader.py            # CSV header mapping and row numbering
        └── service.py               # All-or-nothing currency CSV import

Subpackages are imported explicitly: utils.fx_conversion depends on this
package's constants and exceptions, so nothing heavier is loaded here.
"""

from investment_tracker.services.exceptions import (
    # Base exceptions
    ServiceError,
    # Argument exceptions
    ArgumentMissingError,
    # Validation exceptions
    ValidationError,
    InvalidTransactionError,
    # Business rule exceptions
    BusinessRuleError,
    TransactionTypeNotAllowedError,
    CurrencyMismatchError,
    InsufficientBalanceError,
    # FX rate exceptions
    FXRateError,
    FXConversionError,
    # Import exceptions
    CurrencyImportError,
)

__all__ = [
    # Exceptions
    "ServiceError",
    "ArgumentMissingError",
    "ValidationError",
    "InvalidTransactionError",
    "BusinessRuleError",
    "TransactionTypeNotAllowedError",
    "CurrencyMismatchError",
    "InsufficientBalanceError",
    "FXRateError",
    "FXConversionError",
    "CurrencyImportError",
]
