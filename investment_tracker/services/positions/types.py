# investment_tracker/services/positions/types.py
"""
Data types for stock positions.

All money and share quantities use Decimal for financial precision.

Architecture:
    - StockMarket / StockTransactionType: closed enumerations
    - StockTransaction: one recorded trade (validated on construction)
    - StockSplit: a registered corporate split event
    - Position: derived holding for one ticker
    - UnrealizedPnl: mark-to-market result for a Position
    - AdjustedTransactionValues: split-normalized view of a transaction
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from enum import Enum
from uuid import UUID, uuid4

from investment_tracker.services.constants import (
    DEFAULT_FOREIGN_STOCK_CURRENCY,
    DEFAULT_HOME_CURRENCY,
    SHARE_PRECISION,
    UK_TICKER_SUFFIX,
    ZERO,
)
from investment_tracker.services.exceptions import InvalidTransactionError

# Tickers longer than this are rejected
MAX_TICKER_LENGTH = 20


class StockMarket(str, Enum):
    """Listing market of a ticker. Affects proceeds rounding."""
    TW = "TW"
    US = "US"
    UK = "UK"


class StockTransactionType(str, Enum):
    """
    Stock transaction types.

    Attributes:
        BUY: Shares acquired
        SELL: Shares disposed
        SPLIT: Manual split; the ratio is stored in ``shares``
        ADJUSTMENT: Direct correction of shares and cost
    """
    BUY = "Buy"
    SELL = "Sell"
    SPLIT = "Split"
    ADJUSTMENT = "Adjustment"


def detect_market(symbol: str | None) -> StockMarket:
    """
    Guess the listing market from the ticker shape.

    - Leading digit (0050, 2330, 6547R) -> TW
    - ``.L`` suffix, any case (VWRA.L) -> UK
    - Anything else, including blank -> US
    """
    if symbol is None or not symbol.strip():
        return StockMarket.US

    symbol = symbol.strip()
    if symbol[0].isdigit():
        return StockMarket.TW

    if symbol.upper().endswith(UK_TICKER_SUFFIX.upper()):
        return StockMarket.UK

    return StockMarket.US


def guess_currency(market: StockMarket) -> str:
    """Source currency implied by a market when none is recorded."""
    if market == StockMarket.TW:
        return DEFAULT_HOME_CURRENCY
    return DEFAULT_FOREIGN_STOCK_CURRENCY


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass
class StockTransaction:
    """
    A single stock trade in source (listing) currency.

    Attributes:
        ticker: Normalized ticker (trimmed, upper case)
        transaction_type: Buy, Sell, Split or Adjustment
        shares: Quantity (split ratio for SPLIT), at most 4 decimal places
        price_per_share: Price in source currency
        transaction_date: Trade date
        exchange_rate: 1 source = rate home; None means no home conversion
        fees: Fees in source currency
        market: Listing market, guessed from the ticker when omitted
        currency: Source currency, guessed from the market when omitted
        currency_transaction_id: Ledger record spawned by this trade
    """
    ticker: str
    transaction_type: StockTransactionType
    shares: Decimal
    price_per_share: Decimal
    transaction_date: date
    exchange_rate: Decimal | None = None
    fees: Decimal = field(default_factory=lambda: Decimal("0"))
    market: StockMarket | None = None
    currency: str | None = None
    portfolio_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime | None = None
    currency_transaction_id: UUID | None = None
    is_deleted: bool = False

    def __post_init__(self) -> None:
        if self.ticker is None or not self.ticker.strip():
            raise InvalidTransactionError("Ticker is required", field="ticker")
        self.ticker = self.ticker.strip().upper()
        if len(self.ticker) > MAX_TICKER_LENGTH:
            raise InvalidTransactionError(
                f"Ticker cannot exceed {MAX_TICKER_LENGTH} characters", field="ticker"
            )

        self.transaction_type = StockTransactionType(self.transaction_type)

        if self.shares <= 0:
            raise InvalidTransactionError("Shares must be positive", field="shares")
        self.shares = self.shares.quantize(SHARE_PRECISION, rounding=ROUND_HALF_UP)

        if self.price_per_share < 0:
            raise InvalidTransactionError("Price cannot be negative", field="price_per_share")

        if self.fees < 0:
            raise InvalidTransactionError("Fees cannot be negative", field="fees")

        if self.exchange_rate is not None and self.exchange_rate <= 0:
            raise InvalidTransactionError("Exchange rate must be positive", field="exchange_rate")

        if self.market is None:
            self.market = detect_market(self.ticker)
        else:
            self.market = StockMarket(self.market)

        if self.currency is None:
            self.currency = guess_currency(self.market)
        self.currency = self.currency.upper()

    @property
    def is_taiwan_stock(self) -> bool:
        """Taiwan tickers start with a digit."""
        return self.ticker[0].isdigit()

    @property
    def subtotal_source(self) -> Decimal:
        """shares × price, floored to an integer for Taiwan tickers."""
        subtotal = self.shares * self.price_per_share
        if self.is_taiwan_stock:
            subtotal = subtotal.to_integral_value(rounding=ROUND_FLOOR)
        return subtotal

    @property
    def total_cost_source(self) -> Decimal:
        return self.subtotal_source + self.fees

    @property
    def total_cost_home(self) -> Decimal | None:
        if self.exchange_rate is None:
            return None
        return self.total_cost_source * self.exchange_rate

    @property
    def net_proceeds_source(self) -> Decimal:
        """Sell proceeds after fees, in source currency."""
        return self.subtotal_source - self.fees


@dataclass
class StockSplit:
    """
    A registered stock split.

    Attributes:
        symbol: Ticker the split applies to (matched case-insensitively)
        market: Listing market of the ticker
        split_date: Effective date; trades on or after it are unaffected
        split_ratio: New shares per old share (4 for a 1:4 split)
        note: Free-text description
    """
    symbol: str
    market: StockMarket
    split_date: date
    split_ratio: Decimal
    note: str | None = None

    def __post_init__(self) -> None:
        if self.split_ratio <= 0:
            raise InvalidTransactionError("Split ratio must be positive", field="split_ratio")
        self.market = StockMarket(self.market)


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class Position:
    """
    Derived holding for a ticker (moving weighted-average cost).

    Invariant: total_cost_home / total_shares == average_cost_per_share_home
    whenever total_shares > 0. Everything is zero when no shares are held.
    """
    ticker: str
    total_shares: Decimal = ZERO
    total_cost_home: Decimal = ZERO
    total_cost_source: Decimal = ZERO
    average_cost_per_share_home: Decimal = ZERO
    average_cost_per_share_source: Decimal = ZERO

    @classmethod
    def empty(cls, ticker: str) -> "Position":
        return cls(ticker=ticker)


@dataclass
class UnrealizedPnl:
    """
    Mark-to-market result.

    Attributes:
        current_value_home: shares × current price × current rate
        unrealized_pnl_home: current value minus cost basis
        unrealized_pnl_percentage: P&L as a percentage of cost (0 when cost is 0)
    """
    current_value_home: Decimal
    unrealized_pnl_home: Decimal
    unrealized_pnl_percentage: Decimal


@dataclass
class AdjustedTransactionValues:
    """Original and split-adjusted shares/price of one transaction."""
    original_shares: Decimal
    adjusted_shares: Decimal
    original_price: Decimal
    adjusted_price: Decimal
    split_ratio: Decimal
    has_split_adjustment: bool
