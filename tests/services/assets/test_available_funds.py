# tests/services/assets/test_available_funds.py
"""
Unit tests for available funds aggregation.

Test Coverage:
- Home-currency aggregation of ledgers, accounts, matured deposits
- Installment liabilities (active, cancelled, fully paid)
- Rate provider call order and home-currency short-circuit
- Negative ledger balances
- Argument validation and invalid rates
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import RecordingRateProvider
from investment_tracker.services.assets import (
    AvailableFundsService,
    BankAccount,
    FixedDepositInfo,
    FixedDepositStatus,
    Installment,
    LedgerBalance,
)
from investment_tracker.services.exceptions import ArgumentMissingError, FXConversionError


AS_OF = date(2025, 6, 30)


@pytest.fixture
def service() -> AvailableFundsService:
    return AvailableFundsService(home_currency="TWD")


def matured_deposit(principal: str, interest: str, currency: str = "TWD") -> BankAccount:
    return BankAccount(
        bank_name="Time Deposit Bank",
        total_assets=Decimal(principal),
        currency=currency,
        fixed_deposit=FixedDepositInfo(
            term_months=12,
            start_date=date(2024, 1, 1),
            status=FixedDepositStatus.MATURED,
            expected_interest=Decimal(interest),
        ),
    )


class TestAvailableFunds:
    """Tests for AvailableFundsService.calculate."""

    def test_home_currency_summary(self, service):
        """
        Ledger 1000 + savings 500 + deposit 300 + matured interest 30 = 1830.
        Matured principal + interest = 330; unpaid installments 300 -> 1530.
        """
        provider = RecordingRateProvider({})
        installments = [
            Installment(total_amount=Decimal("600"), number_of_installments=6, remaining_installments=3),
        ]

        summary = service.calculate(
            ledgers=[LedgerBalance(Decimal("1000"), "TWD")],
            bank_accounts=[
                BankAccount(bank_name="Savings", total_assets=Decimal("500")),
                matured_deposit("300", "30"),
            ],
            installments=installments,
            get_exchange_rate=provider,
            as_of=AS_OF,
        )

        assert summary.total_bank_assets == Decimal("1830")
        assert summary.fixed_deposits_principal == Decimal("330")
        assert summary.unpaid_installment_balance == Decimal("300")
        assert summary.available_funds == Decimal("1530")
        assert provider.calls == []

    def test_multi_currency_conversion_and_call_order(self, service):
        provider = RecordingRateProvider({"USD": Decimal("30"), "JPY": Decimal("0.2")})

        summary = service.calculate(
            ledgers=[LedgerBalance(Decimal("100"), "USD"), LedgerBalance(Decimal("10000"), "JPY")],
            bank_accounts=[
                BankAccount(bank_name="Home bank", total_assets=Decimal("1000")),
                matured_deposit("1000", "10", currency="USD"),
            ],
            installments=[],
            get_exchange_rate=provider,
            as_of=AS_OF,
        )

        assert provider.calls == ["USD", "JPY", "USD", "USD", "USD"]
        assert summary.total_bank_assets == Decimal("36300")
        assert summary.fixed_deposits_principal == Decimal("30300")
        assert summary.available_funds == Decimal("36300")

    def test_zero_foreign_balance_still_consults_rate(self, service):
        provider = RecordingRateProvider({"USD": Decimal("30")})

        service.calculate(
            ledgers=[LedgerBalance(Decimal("0"), "USD")],
            bank_accounts=[],
            installments=[],
            get_exchange_rate=provider,
            as_of=AS_OF,
        )

        assert provider.calls == ["USD"]

    def test_negative_ledger_balance_reduces_funds(self, service):
        summary = service.calculate(
            ledgers=[LedgerBalance(Decimal("-50"), "USD"), LedgerBalance(Decimal("1000"), "TWD")],
            bank_accounts=[],
            installments=[],
            get_exchange_rate=RecordingRateProvider({"USD": Decimal("30")}),
            as_of=AS_OF,
        )

        assert summary.total_bank_assets == Decimal("-500")
        assert summary.available_funds == Decimal("-500")

    def test_active_deposit_past_maturity_counts_as_matured(self, service):
        account = BankAccount(
            bank_name="Deposit",
            total_assets=Decimal("1000"),
            fixed_deposit=FixedDepositInfo(
                term_months=6, start_date=date(2024, 12, 31), expected_interest=Decimal("12"),
            ),
        )

        summary = service.calculate([], [account], [], RecordingRateProvider({}), as_of=AS_OF)

        assert account.fixed_deposit.maturity_date == date(2025, 6, 30)
        assert summary.fixed_deposits_principal == Decimal("1012")

    def test_deposit_not_yet_matured(self, service):
        account = BankAccount(
            bank_name="Deposit",
            total_assets=Decimal("1000"),
            fixed_deposit=FixedDepositInfo(
                term_months=12, start_date=date(2025, 1, 1), expected_interest=Decimal("12"),
            ),
        )

        summary = service.calculate([], [account], [], RecordingRateProvider({}), as_of=AS_OF)

        assert summary.total_bank_assets == Decimal("1000")
        assert summary.fixed_deposits_principal == Decimal("0")

    def test_closed_deposit_never_matures(self, service):
        account = BankAccount(
            bank_name="Deposit",
            total_assets=Decimal("1000"),
            fixed_deposit=FixedDepositInfo(
                term_months=1, start_date=date(2020, 1, 1),
                status=FixedDepositStatus.CLOSED, expected_interest=Decimal("5"),
            ),
        )

        summary = service.calculate([], [account], [], RecordingRateProvider({}), as_of=AS_OF)

        assert summary.fixed_deposits_principal == Decimal("0")

    def test_cancelled_and_paid_installments_ignored(self, service):
        installments = [
            Installment(Decimal("1000"), 10, 5, is_cancelled=True),
            Installment(Decimal("1000"), 10, 0),
            Installment(Decimal("100"), 3, 1),
        ]

        summary = service.calculate([], [], installments, RecordingRateProvider({}), as_of=AS_OF)

        assert summary.unpaid_installment_balance == Decimal("33.33")
        assert summary.available_funds == Decimal("-33.33")

    @pytest.mark.parametrize("missing", ["ledgers", "bank_accounts", "installments", "get_exchange_rate"])
    def test_missing_argument_raises(self, service, missing):
        arguments = {
            "ledgers": [],
            "bank_accounts": [],
            "installments": [],
            "get_exchange_rate": RecordingRateProvider({}),
        }
        arguments[missing] = None

        with pytest.raises(ArgumentMissingError) as exc_info:
            service.calculate(**arguments)

        assert exc_info.value.argument == missing

    def test_non_positive_rate_raises(self, service):
        with pytest.raises(FXConversionError):
            service.calculate(
                ledgers=[LedgerBalance(Decimal("10"), "USD")],
                bank_accounts=[],
                installments=[],
                get_exchange_rate=RecordingRateProvider({"USD": Decimal("0")}),
            )
