# investment_tracker/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test fakes work without explicit inheritance
- Clear documentation of the only seams to external collaborators
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from investment_tracker.services.ledger.types import CurrencyTransaction


class ExchangeRateProvider(Protocol):
    """Interface required by AvailableFundsService (rate per currency code)."""

    def __call__(self, currency_code: str) -> Decimal:
        ...


class CurrencyTransactionRepository(Protocol):
    """
    Interface required by CurrencyTransactionImportService.

    An import batch is atomic: the service calls add_all once with every
    row, then commit. On any failure it calls rollback.
    """

    def add_all(self, transactions: Iterable[CurrencyTransaction]) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
