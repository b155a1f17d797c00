# investment_tracker/services/constants.py
"""
Centralized constants for the Investment Tracker services.

This module provides a single source of truth for all business constants
used across the calculation engine. Centralizing these values:

1. Prevents inconsistencies from duplicate definitions
2. Makes it easy to tune parameters in one place
3. Documents the meaning and units of each constant

Usage:
    from investment_tracker.services.constants import (
        CALENDAR_DAYS_PER_YEAR,
        CURRENCY_PRECISION,
        STOCK_TOP_UP_NOTE_PREFIX,
    )
"""

from decimal import Decimal


# =============================================================================
# DECIMAL SHORTCUTS
# =============================================================================

ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# CURRENCY SETTINGS
# =============================================================================

# Home currency used when neither the caller nor the environment provides one
DEFAULT_HOME_CURRENCY: str = "TWD"

# Source currency assumed for non-Taiwan tickers when none is recorded
DEFAULT_FOREIGN_STOCK_CURRENCY: str = "USD"


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Standard number of calendar days in a year
# Used for the XIRR year fraction (days / 365)
CALENDAR_DAYS_PER_YEAR: int = 365

# Used for monthly interest estimates
MONTHS_PER_YEAR: int = 12


# =============================================================================
# PRECISION SETTINGS
# =============================================================================

# Money amounts (ledger total cost, realized P&L, converted balances)
CURRENCY_PRECISION: Decimal = Decimal("0.01")

# Stock share quantities are recorded with at most 4 decimal places
SHARE_PRECISION: Decimal = Decimal("0.0001")

# Ledger weighted-average cost (home currency per foreign unit)
RATE_PRECISION: Decimal = Decimal("0.000001")

# Bank totals converted with an explicit exchange-rate mapping
CONVERSION_PRECISION: Decimal = Decimal("0.0001")


# =============================================================================
# IRR/XIRR CALCULATION SETTINGS
# =============================================================================

# Maximum iterations for Newton-Raphson method in XIRR calculation
# 100 iterations is sufficient for convergence in virtually all cases
IRR_MAX_ITERATIONS: int = 100

# Convergence tolerance for XIRR calculation
# 0.0000001 = 0.00001% precision (more than sufficient for financial reporting)
IRR_TOLERANCE: float = 1e-7

# Initial guess for IRR iteration (10% annual return)
# Starting near typical market returns helps convergence
IRR_INITIAL_GUESS: float = 0.1

# Bounds applied to every Newton step
# -99.9% keeps (1 + r) positive, 1e6 caps runaway short-period annualization
IRR_MIN_RATE: float = -0.999
IRR_MAX_RATE: float = 1_000_000.0

# Initial upper bound of the bisection fallback bracket
IRR_BISECTION_HIGH: float = 10.0
IRR_BISECTION_ITERATIONS: int = 100

# Derivative magnitude below which Newton nudges the guess instead of dividing
IRR_DERIVATIVE_EPSILON: float = 1e-10

# Nudge applied to the guess when the derivative vanishes
IRR_DERIVATIVE_NUDGE: float = 0.1

# XIRR results are reported with 6 decimal places
IRR_RESULT_PRECISION: Decimal = Decimal("0.000001")


# =============================================================================
# STOCK SETTLEMENT MARKERS
# =============================================================================

# Notes prefix of a ledger top-up created while settling a stock purchase.
# Linked exchange records carrying this prefix are genuine external top-ups.
STOCK_TOP_UP_NOTE_PREFIX: str = "補足買入"

# Ticker suffix identifying London-listed securities
UK_TICKER_SUFFIX: str = ".L"


# =============================================================================
# CSV IMPORT SETTINGS
# =============================================================================

# Maximum number of data rows accepted in a single import
IMPORT_MAX_ROWS: int = 5000

# Maximum length of the free-text notes column
IMPORT_NOTES_MAX_LENGTH: int = 500

# Transactions dated further in the future than this are rejected
IMPORT_MAX_FUTURE_DAYS: int = 1

# Accepted date layouts, tried in order
IMPORT_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
)
