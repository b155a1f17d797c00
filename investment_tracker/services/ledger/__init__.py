# investment_tracker/services/ledger/__init__.py
"""
Currency Ledger Package.

This package provides foreign-currency cash ledger capabilities:
- Balance and moving weighted-average cost replay
- Realized P&L on currency sales
- The classification policy shared by manual entry, import and returns
- Settlement records linking stock trades to a bound ledger

Architecture:
    ledger/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Ledger, transaction and state types
    ├── policy.py                # Classification and validation policy
    ├── service.py               # CurrencyLedgerService
    └── linking.py               # Stock trade settlement records

Usage:
    from investment_tracker.services.ledger import CurrencyLedgerService, policy

    state = CurrencyLedgerService().replay(transactions)
    print(f"Balance: {state.balance} @ {state.average_cost}")

    if policy.is_explicit_external_cash_flow(tx, "USD"):
        ...
"""

from investment_tracker.services.ledger import policy
from investment_tracker.services.ledger.linking import (
    build_linked_currency_transaction,
    build_top_up_transaction,
    validate_currency_matches_bound_ledger,
)
from investment_tracker.services.ledger.policy import (
    AmountPresence,
    AmountRequirement,
    PolicyDiagnostic,
    PolicyValidationResult,
)
from investment_tracker.services.ledger.service import CurrencyLedgerService
from investment_tracker.services.ledger.types import (
    CashFlowClass,
    CurrencyLedger,
    CurrencyTransaction,
    CurrencyTransactionType,
    LedgerState,
    derive_amounts,
)

__all__ = [
    # Service
    "CurrencyLedgerService",
    # Policy
    "policy",
    "AmountPresence",
    "AmountRequirement",
    "PolicyDiagnostic",
    "PolicyValidationResult",
    # Linking
    "build_linked_currency_transaction",
    "build_top_up_transaction",
    "validate_currency_matches_bound_ledger",
    # Types
    "CashFlowClass",
    "CurrencyLedger",
    "CurrencyTransaction",
    "CurrencyTransactionType",
    "LedgerState",
    "derive_amounts",
]
