# investment_tracker/services/ledger/service.py
"""
Currency ledger engine.

Maintains balance and moving weighted-average cost of a foreign-currency
ledger by replaying its events in order (date, then creation time).

Balance effect:
    + ExchangeBuy, Deposit, TransferInBalance, StockSell,
      Interest, OtherIncome, Dividend
    - ExchangeSell, Withdraw, Spend, OtherExpense

Cost effect:
    Cost-bearing inflows (ExchangeBuy, Deposit, TransferInBalance, StockSell)
        add their home amount (home amount, else foreign × rate, else 0)
    Zero-cost inflows (Interest, OtherIncome, Dividend)
        add balance only, diluting the average cost
    Outflows
        remove foreign × average cost, capped at the remaining cost.
        ExchangeSell realizes home amount - cost removed.

The balance may go negative. Average cost is 0 whenever balance <= 0,
and total cost never goes negative.

Usage:
    service = CurrencyLedgerService()
    balance = service.calculate_balance(transactions)
    average = service.calculate_weighted_average_cost(transactions)
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from investment_tracker.services.constants import CURRENCY_PRECISION, RATE_PRECISION, ZERO
from investment_tracker.services.exceptions import InsufficientBalanceError
from investment_tracker.services.ledger.types import (
    CurrencyTransaction,
    CurrencyTransactionType,
    LedgerState,
)

logger = logging.getLogger(__name__)

_COST_BEARING_INFLOWS = frozenset({
    CurrencyTransactionType.EXCHANGE_BUY,
    CurrencyTransactionType.DEPOSIT,
    CurrencyTransactionType.TRANSFER_IN_BALANCE,
    CurrencyTransactionType.STOCK_SELL,
})

_ZERO_COST_INFLOWS = frozenset({
    CurrencyTransactionType.INTEREST,
    CurrencyTransactionType.OTHER_INCOME,
    CurrencyTransactionType.DIVIDEND,
})

_OUTFLOWS = frozenset({
    CurrencyTransactionType.EXCHANGE_SELL,
    CurrencyTransactionType.WITHDRAW,
    CurrencyTransactionType.SPEND,
    CurrencyTransactionType.OTHER_EXPENSE,
})


def _chronological_key(transaction: CurrencyTransaction) -> tuple:
    created_at = transaction.created_at
    return (
        transaction.transaction_date,
        created_at is not None,
        created_at.timestamp() if created_at is not None else 0.0,
    )


def _home_value(transaction: CurrencyTransaction) -> Decimal:
    if transaction.home_amount is not None:
        return transaction.home_amount
    if transaction.exchange_rate is not None:
        return transaction.foreign_amount * transaction.exchange_rate
    return ZERO


def ordered_active(transactions: Iterable[CurrencyTransaction]) -> list[CurrencyTransaction]:
    """Non-deleted transactions in replay order (stable)."""
    return sorted((t for t in transactions if not t.is_deleted), key=_chronological_key)


def balance_change(transaction: CurrencyTransaction) -> Decimal:
    """Signed effect of one event on the foreign balance."""
    if transaction.transaction_type in _OUTFLOWS:
        return -transaction.foreign_amount
    return transaction.foreign_amount


# =============================================================================
# LEDGER SERVICE
# =============================================================================

class CurrencyLedgerService:
    """
    Stateless currency ledger calculations.

    Every public method replays the full history, so results are
    idempotent and independent of call order.
    """

    def replay(self, transactions: Iterable[CurrencyTransaction]) -> LedgerState:
        """
        Replay a ledger and return its state.

        Args:
            transactions: Ledger history in any order

        Returns:
            LedgerState with balance, total cost (2 dp),
            average cost (6 dp) and realized P&L (2 dp)
        """
        balance = ZERO
        total_cost = ZERO
        realized_pnl = ZERO
        history = ordered_active(transactions)

        for transaction in history:
            transaction_type = transaction.transaction_type
            amount = transaction.foreign_amount

            if transaction_type in _COST_BEARING_INFLOWS:
                total_cost += _home_value(transaction)
                balance += amount

            elif transaction_type in _ZERO_COST_INFLOWS:
                balance += amount

            elif transaction_type in _OUTFLOWS:
                if balance > ZERO:
                    average = total_cost / balance
                    cost_removed = min(amount * average, total_cost)
                    total_cost -= cost_removed
                    if transaction_type == CurrencyTransactionType.EXCHANGE_SELL:
                        realized_pnl += _home_value(transaction) - cost_removed
                balance -= amount
                if balance <= ZERO:
                    total_cost = ZERO

        average_cost = (
            (total_cost / balance).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)
            if balance > ZERO
            else ZERO
        )

        logger.debug(
            f"Replayed {len(history)} ledger transactions: "
            f"balance={balance}, total_cost={total_cost}"
        )

        return LedgerState(
            balance=balance,
            total_cost=max(ZERO, total_cost).quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP),
            average_cost=average_cost,
            realized_pnl=realized_pnl.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP),
        )

    def calculate_balance(self, transactions: Iterable[CurrencyTransaction]) -> Decimal:
        """Sum of signed foreign amounts; 0 for an empty ledger."""
        balance = ZERO
        for transaction in ordered_active(transactions):
            balance += balance_change(transaction)
        return balance

    def calculate_weighted_average_cost(self, transactions: Iterable[CurrencyTransaction]) -> Decimal:
        """Home currency per foreign unit, 6 dp; 0 when the balance is not positive."""
        return self.replay(transactions).average_cost

    def calculate_total_cost(self, transactions: Iterable[CurrencyTransaction]) -> Decimal:
        """Home-currency cost basis of the balance, 2 dp."""
        return self.replay(transactions).total_cost

    def calculate_realized_pnl(self, transactions: Iterable[CurrencyTransaction]) -> Decimal:
        """Cumulative gain realized by ExchangeSell events, 2 dp."""
        return self.replay(transactions).realized_pnl

    def validate_spend(self, transactions: Iterable[CurrencyTransaction], amount: Decimal) -> bool:
        """True iff ``amount`` does not exceed the current balance."""
        return self.calculate_balance(transactions) >= amount

    def ensure_spend(self, transactions: Iterable[CurrencyTransaction], amount: Decimal) -> None:
        """
        Strict-mode spend check.

        Raises:
            InsufficientBalanceError: If ``amount`` exceeds the balance
        """
        balance = self.calculate_balance(transactions)
        if balance < amount:
            logger.warning(f"Spend of {amount} rejected: balance is {balance}")
            raise InsufficientBalanceError(balance=balance, requested=amount)
