# investment_tracker/services/assets/available_funds.py
"""
Available funds aggregation.

Rolls ledgers, bank accounts, matured fixed deposits and installment
liabilities into home-currency figures:

    total_bank_assets        = Σ ledger balances
                             + Σ account total assets
                             + Σ matured deposit expected interest
    fixed_deposits_principal = Σ matured deposit (principal + expected interest)
    unpaid_installments      = Σ active installment unpaid balance
    available_funds          = total_bank_assets - unpaid_installments

Negative ledger balances are included as-is (closed-loop valuation).

Conversion order is fixed: ledgers, then accounts, then matured deposit
interest, then matured deposit principal + interest. The rate callable is
consulted for every non-home amount, zero amounts included, and never for
the home currency.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from investment_tracker.config import settings
from investment_tracker.services.assets.types import (
    AvailableFundsSummary,
    BankAccount,
    Installment,
    LedgerBalance,
)
from investment_tracker.services.constants import CURRENCY_PRECISION, ZERO
from investment_tracker.services.exceptions import ArgumentMissingError
from investment_tracker.services.protocols import ExchangeRateProvider
from investment_tracker.utils.fx_conversion import convert_to_home

logger = logging.getLogger(__name__)


class AvailableFundsService:
    """Computes the household's deployable cash in home currency."""

    def __init__(self, home_currency: str | None = None) -> None:
        self.home_currency = (home_currency or settings.home_currency).upper()

    def calculate(
            self,
            ledgers: Iterable[LedgerBalance],
            bank_accounts: Iterable[BankAccount],
            installments: Iterable[Installment],
            get_exchange_rate: ExchangeRateProvider,
            as_of: date | None = None,
    ) -> AvailableFundsSummary:
        """
        Calculate the available funds summary.

        Args:
            ledgers: Currency ledger balances
            bank_accounts: Savings and fixed-deposit accounts
            installments: Installment plans
            get_exchange_rate: Rate per currency code (1 foreign = rate home)
            as_of: Date used to detect deposits matured by date (default today)

        Returns:
            AvailableFundsSummary in home currency

        Raises:
            ArgumentMissingError: If any argument is None
            FXConversionError: If the rate source returns a non-positive rate
        """
        if ledgers is None:
            raise ArgumentMissingError("ledgers")
        if bank_accounts is None:
            raise ArgumentMissingError("bank_accounts")
        if installments is None:
            raise ArgumentMissingError("installments")
        if get_exchange_rate is None:
            raise ArgumentMissingError("get_exchange_rate")

        as_of = as_of or date.today()
        accounts = list(bank_accounts)

        def to_home(amount: Decimal, currency: str) -> Decimal:
            return convert_to_home(amount, currency, self.home_currency, get_exchange_rate)

        ledger_total = sum(
            (to_home(ledger.balance, ledger.currency) for ledger in ledgers), ZERO
        )
        account_total = sum(
            (to_home(account.total_assets, account.currency) for account in accounts), ZERO
        )

        matured = [
            account for account in accounts
            if account.fixed_deposit is not None and account.fixed_deposit.is_matured(as_of)
        ]
        matured_interest = sum(
            (to_home(account.fixed_deposit.expected_interest, account.currency) for account in matured),
            ZERO,
        )
        fixed_deposits_principal = sum(
            (
                to_home(account.total_assets + account.fixed_deposit.expected_interest, account.currency)
                for account in matured
            ),
            ZERO,
        )

        unpaid = sum(
            (installment.unpaid_balance for installment in installments if installment.is_active),
            ZERO,
        ).quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

        total_bank_assets = ledger_total + account_total + matured_interest

        logger.debug(
            f"Available funds: bank={total_bank_assets}, matured_deposits={len(matured)}, "
            f"unpaid_installments={unpaid}"
        )

        return AvailableFundsSummary(
            total_bank_assets=total_bank_assets,
            fixed_deposits_principal=fixed_deposits_principal,
            unpaid_installment_balance=unpaid,
            available_funds=total_bank_assets - unpaid,
        )
