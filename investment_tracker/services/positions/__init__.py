# investment_tracker/services/positions/__init__.py
"""
Stock Positions Package.

This package derives holdings from recorded stock trades:
- Moving weighted-average cost positions (home and source currency)
- Unrealized and realized P&L with the Taiwan floor rule
- Split normalization of historical trades

Architecture:
    positions/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Transactions, splits and result types
    ├── splits.py                # StockSplitAdjustmentService
    └── calculator.py            # PositionCalculator

Usage:
    from investment_tracker.services.positions import PositionCalculator

    calculator = PositionCalculator()
    position = calculator.calculate_position("0050", transactions)
    print(f"Average cost: {position.average_cost_per_share_home}")
"""

from investment_tracker.services.positions.calculator import PositionCalculator
from investment_tracker.services.positions.splits import StockSplitAdjustmentService
from investment_tracker.services.positions.types import (
    AdjustedTransactionValues,
    Position,
    StockMarket,
    StockSplit,
    StockTransaction,
    StockTransactionType,
    UnrealizedPnl,
    detect_market,
    guess_currency,
)

__all__ = [
    # Calculators
    "PositionCalculator",
    "StockSplitAdjustmentService",
    # Types
    "AdjustedTransactionValues",
    "Position",
    "StockMarket",
    "StockSplit",
    "StockTransaction",
    "StockTransactionType",
    "UnrealizedPnl",
    # Helpers
    "detect_market",
    "guess_currency",
]
