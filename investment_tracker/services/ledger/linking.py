# investment_tracker/services/ledger/linking.py
"""
Stock trade to bound-ledger linking.

When a portfolio is bound to a currency ledger, every stock trade settles
against that ledger:

- BUY  -> SPEND of the trade's total source cost
- SELL -> STOCK_SELL of the net proceeds (subtotal - fees), when positive

Settlement records are flagged ``is_internal_settlement=True`` so return
calculations never mistake them for external capital. A top-up bought to
cover a purchase shortfall is the one linked record that IS external: it is
an EXCHANGE_BUY with the flag cleared and the top-up prefix in its notes.
"""

import logging
from decimal import Decimal

from investment_tracker.config import settings
from investment_tracker.services.constants import STOCK_TOP_UP_NOTE_PREFIX, ZERO
from investment_tracker.services.exceptions import CurrencyMismatchError, ValidationError
from investment_tracker.services.ledger import policy
from investment_tracker.services.ledger.types import (
    CurrencyLedger,
    CurrencyTransaction,
    CurrencyTransactionType,
)
from investment_tracker.services.positions.types import StockTransaction, StockTransactionType

logger = logging.getLogger(__name__)


def validate_currency_matches_bound_ledger(stock_currency: str, ledger: CurrencyLedger) -> None:
    """
    Raises:
        CurrencyMismatchError: If the stock currency differs from the ledger's
    """
    if stock_currency.strip().upper() != ledger.currency_code:
        raise CurrencyMismatchError(stock_currency.strip().upper(), ledger.currency_code)


def build_linked_currency_transaction(
        stock_transaction: StockTransaction,
        ledger: CurrencyLedger,
) -> CurrencyTransaction | None:
    """
    Build the ledger settlement record for a stock trade.

    Returns:
        The settlement transaction, or None when the trade moves no cash
        (splits, adjustments, sells whose fees exceed the proceeds)

    Raises:
        CurrencyMismatchError: If the trade is not in the ledger's currency
    """
    validate_currency_matches_bound_ledger(stock_transaction.currency, ledger)

    if stock_transaction.transaction_type == StockTransactionType.BUY:
        transaction_type = CurrencyTransactionType.SPEND
        amount = stock_transaction.total_cost_source
        notes = f"Buy {stock_transaction.shares} {stock_transaction.ticker}"
    elif stock_transaction.transaction_type == StockTransactionType.SELL:
        transaction_type = CurrencyTransactionType.STOCK_SELL
        amount = stock_transaction.net_proceeds_source
        notes = f"Sell {stock_transaction.shares} {stock_transaction.ticker}"
    else:
        return None

    if amount <= ZERO:
        logger.debug(
            f"No ledger settlement for {stock_transaction.ticker} on "
            f"{stock_transaction.transaction_date}: amount={amount}"
        )
        return None

    policy.ensure_valid(ledger.currency_code, transaction_type, home_currency=ledger.home_currency)

    return CurrencyTransaction(
        ledger_id=ledger.id,
        transaction_date=stock_transaction.transaction_date,
        transaction_type=transaction_type,
        foreign_amount=amount,
        exchange_rate=stock_transaction.exchange_rate,
        related_stock_transaction_id=stock_transaction.id,
        notes=notes,
        is_internal_settlement=True,
    )


def build_top_up_transaction(
        stock_transaction: StockTransaction,
        ledger: CurrencyLedger,
        shortfall: Decimal,
        home_amount: Decimal | None = None,
        exchange_rate: Decimal | None = None,
) -> CurrencyTransaction:
    """
    Build the external currency purchase covering a buy shortfall.

    Raises:
        TransactionTypeNotAllowedError: On a home-currency ledger
        ValidationError: If the shortfall is not positive
    """
    home_currency = ledger.home_currency or settings.home_currency
    policy.ensure_valid(ledger.currency_code, CurrencyTransactionType.EXCHANGE_BUY, home_currency=home_currency)

    if shortfall <= ZERO:
        raise ValidationError("Top-up shortfall must be positive", field="shortfall")

    return CurrencyTransaction(
        ledger_id=ledger.id,
        transaction_date=stock_transaction.transaction_date,
        transaction_type=CurrencyTransactionType.EXCHANGE_BUY,
        foreign_amount=shortfall,
        home_amount=home_amount,
        exchange_rate=exchange_rate,
        related_stock_transaction_id=stock_transaction.id,
        notes=f"{STOCK_TOP_UP_NOTE_PREFIX} {stock_transaction.ticker}",
        is_internal_settlement=False,
    )
