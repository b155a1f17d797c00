# investment_tracker/services/assets/interest.py
"""
Interest estimation for bank accounts.

    effective_principal = min(total_assets, interest_cap)
    monthly = round(effective_principal × rate / 100 / 12, 2)
    yearly  = round(effective_principal × rate / 100, 2)

Yearly interest is rounded from its own expression, not monthly × 12.
"""

from decimal import Decimal, ROUND_HALF_UP

from investment_tracker.services.assets.types import BankAccount, InterestEstimate
from investment_tracker.services.constants import CURRENCY_PRECISION, HUNDRED, MONTHS_PER_YEAR


class InterestEstimationService:
    """Capped simple-interest projection."""

    def calculate(self, bank_account: BankAccount) -> InterestEstimate:
        principal = min(bank_account.total_assets, bank_account.interest_cap)
        annual = principal * bank_account.interest_rate / HUNDRED

        monthly = (annual / Decimal(MONTHS_PER_YEAR)).quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)
        yearly = annual.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

        return InterestEstimate(monthly_interest=monthly, yearly_interest=yearly)
