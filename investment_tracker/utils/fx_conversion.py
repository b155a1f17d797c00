# investment_tracker/utils/fx_conversion.py
"""
FX Rate Conversion Utilities

Every rate in the engine follows one convention:

    1 foreign_currency = rate × home_currency

so converting a foreign amount into the home currency always MULTIPLIES by
the rate. Examples: a USD ledger in a TWD household uses rate≈31.5; a JPY
account uses rate≈0.22.

Two entry points exist because callers hold rates in two shapes:

1. RATE CALLABLE (AvailableFundsService):
   `get_rate(currency_code) -> Decimal`, supplied by an external provider.
   The callable must never be invoked for the home currency.

2. RATE MAPPING (TotalAssetsService):
   `{currency_code: rate}`, resolved by the caller ahead of time.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Callable

from investment_tracker.services.constants import CURRENCY_PRECISION
from investment_tracker.services.exceptions import FXConversionError


def convert_with_rate(
    amount: Decimal,
    rate: Decimal,
    precision: Decimal = CURRENCY_PRECISION,
) -> Decimal:
    """
    Convert a foreign amount into the home currency with a known rate.

    Args:
        amount: Amount in foreign currency
        rate: FX rate (1 foreign = rate home)
        precision: Quantization step of the result

    Returns:
        Converted amount, rounded half-up to ``precision``

    Raises:
        FXConversionError: If the rate is missing or not positive
    """
    if rate is None or rate <= 0:
        raise FXConversionError(f"rate must be positive, got {rate}")
    return (amount * rate).quantize(precision, rounding=ROUND_HALF_UP)


def convert_to_home(
    amount: Decimal,
    currency: str,
    home_currency: str,
    get_rate: Callable[[str], Decimal],
    precision: Decimal = CURRENCY_PRECISION,
) -> Decimal:
    """
    Convert an amount into the home currency using a rate callable.

    Home-currency amounts are returned unchanged without consulting the
    rate source. Every other currency calls ``get_rate`` exactly once,
    including zero amounts.

    Example:
        - Home currency: TWD
        - Amount: 100 USD
        - get_rate("USD") -> 30
        - Result: 3000.00 TWD

    Args:
        amount: Amount in ``currency``
        currency: ISO 4217 code of the amount
        home_currency: ISO 4217 code of the target currency
        get_rate: Callable returning the rate for a currency code
        precision: Quantization step of the result

    Returns:
        Amount in the home currency

    Raises:
        FXConversionError: If the rate source returns a missing or
            non-positive rate
    """
    if currency.upper() == home_currency.upper():
        return amount

    rate = get_rate(currency)
    if rate is None or rate <= 0:
        raise FXConversionError(
            f"rate for {currency} must be positive, got {rate}",
            currency=currency,
        )
    return (amount * rate).quantize(precision, rounding=ROUND_HALF_UP)
