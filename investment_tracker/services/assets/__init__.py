# investment_tracker/services/assets/__init__.py
"""
Assets Package.

This package aggregates household assets outside the stock portfolio:
- Available funds (ledgers, bank accounts, matured deposits, installments)
- Interest estimation for bank accounts
- Total assets summary (investments vs bank split)

Architecture:
    assets/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Accounts, deposits, installments, results
    ├── interest.py              # InterestEstimationService
    ├── available_funds.py       # AvailableFundsService
    └── total_assets.py          # TotalAssetsService

Usage:
    from investment_tracker.services.assets import AvailableFundsService

    summary = AvailableFundsService().calculate(
        ledgers=[LedgerBalance(Decimal("1000"), "TWD")],
        bank_accounts=accounts,
        installments=installments,
        get_exchange_rate=rate_provider,
    )
    print(f"Available: {summary.available_funds}")
"""

from investment_tracker.services.assets.available_funds import AvailableFundsService
from investment_tracker.services.assets.interest import InterestEstimationService
from investment_tracker.services.assets.total_assets import TotalAssetsService
from investment_tracker.services.assets.types import (
    AvailableFundsSummary,
    BankAccount,
    FixedDepositInfo,
    FixedDepositStatus,
    Installment,
    InterestEstimate,
    LedgerBalance,
    TotalAssetsSummary,
    add_months,
)

__all__ = [
    # Services
    "AvailableFundsService",
    "InterestEstimationService",
    "TotalAssetsService",
    # Types
    "AvailableFundsSummary",
    "BankAccount",
    "FixedDepositInfo",
    "FixedDepositStatus",
    "Installment",
    "InterestEstimate",
    "LedgerBalance",
    "TotalAssetsSummary",
    # Helpers
    "add_months",
]
