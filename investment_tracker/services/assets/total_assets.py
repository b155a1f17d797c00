# investment_tracker/services/assets/total_assets.py
"""
Total assets summary.

    bank_total  = Σ account total assets (converted to home currency)
    grand_total = investment_total + bank_total
    percentages = component / grand_total × 100, or 0 when grand_total <= 0

Accounts in a foreign currency are converted with the optional rate mapping
(rounded to 4 dp). An account whose rate is missing contributes 0. With no
mapping at all, every account is taken at face value in home currency.
"""

import logging
from decimal import Decimal
from typing import Mapping, Sequence

from investment_tracker.config import settings
from investment_tracker.services.assets.interest import InterestEstimationService
from investment_tracker.services.assets.types import BankAccount, TotalAssetsSummary
from investment_tracker.services.constants import CONVERSION_PRECISION, HUNDRED, ZERO
from investment_tracker.utils.fx_conversion import convert_with_rate

logger = logging.getLogger(__name__)


class TotalAssetsService:
    """Combines investment value and bank assets into one summary."""

    def __init__(
            self,
            interest_service: InterestEstimationService | None = None,
            home_currency: str | None = None,
    ) -> None:
        self.interest_service = interest_service or InterestEstimationService()
        self.home_currency = (home_currency or settings.home_currency).upper()

    def calculate(
            self,
            investment_total: Decimal,
            bank_accounts: Sequence[BankAccount],
            exchange_rates: Mapping[str, Decimal] | None = None,
    ) -> TotalAssetsSummary:
        """
        Calculate the total assets summary.

        Args:
            investment_total: Portfolio value in home currency
            bank_accounts: All bank accounts
            exchange_rates: Optional {currency_code: rate to home currency}

        Returns:
            TotalAssetsSummary in home currency
        """
        rates = self._normalize_rates(exchange_rates)

        bank_total = sum((self._to_home(account, rates) for account in bank_accounts), ZERO)

        estimates = [self.interest_service.calculate(account) for account in bank_accounts]
        total_monthly = sum((e.monthly_interest for e in estimates), ZERO)
        total_yearly = sum((e.yearly_interest for e in estimates), ZERO)

        grand_total = investment_total + bank_total
        if grand_total > ZERO:
            investment_percentage = investment_total / grand_total * HUNDRED
            bank_percentage = bank_total / grand_total * HUNDRED
        else:
            investment_percentage = ZERO
            bank_percentage = ZERO

        return TotalAssetsSummary(
            investment_total=investment_total,
            bank_total=bank_total,
            grand_total=grand_total,
            investment_percentage=investment_percentage,
            bank_percentage=bank_percentage,
            total_monthly_interest=total_monthly,
            total_yearly_interest=total_yearly,
        )

    @staticmethod
    def _normalize_rates(exchange_rates: Mapping[str, Decimal] | None) -> dict[str, Decimal] | None:
        if exchange_rates is None:
            return None
        return {
            code.strip().upper(): rate
            for code, rate in exchange_rates.items()
            if code and code.strip() and rate is not None and rate > ZERO
        }

    def _to_home(self, account: BankAccount, rates: dict[str, Decimal] | None) -> Decimal:
        if rates is None or account.currency == self.home_currency:
            return account.total_assets

        rate = rates.get(account.currency)
        if rate is None:
            logger.warning(
                f"No exchange rate for {account.currency}; "
                f"excluding {account.bank_name} from bank total"
            )
            return ZERO

        return convert_with_rate(account.total_assets, rate, precision=CONVERSION_PRECISION)
