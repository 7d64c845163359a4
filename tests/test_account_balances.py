"""
Account Balance Calculator Tests

Covers the sign rule per account type, zero-activity accounts and
lines that reference accounts outside the report scope.
"""

from decimal import Decimal

import pytest

from app.models.accounting import AccountType, NormalBalance
from app.services.statement_calculators import BalanceCalculator, compute_balances


class TestSignConvention:
    """Normal balance side is positive."""

    @pytest.mark.parametrize("account_type", [AccountType.ASSET, AccountType.EXPENSE, AccountType.COGS])
    def test_debit_normal_types(self, account_type):
        result = BalanceCalculator.signed_balance(account_type, Decimal("500"), Decimal("200"))
        assert result == Decimal("300")
        assert BalanceCalculator.normal_balance_for(account_type) == NormalBalance.DEBIT

    @pytest.mark.parametrize("account_type", [AccountType.LIABILITY, AccountType.EQUITY, AccountType.REVENUE])
    def test_credit_normal_types(self, account_type):
        result = BalanceCalculator.signed_balance(account_type, Decimal("500"), Decimal("200"))
        assert result == Decimal("-300")
        assert BalanceCalculator.normal_balance_for(account_type) == NormalBalance.CREDIT

    def test_swapping_sides_inverts_sign(self):
        forward = BalanceCalculator.signed_balance(AccountType.ASSET, Decimal("125.50"), Decimal("25.25"))
        swapped = BalanceCalculator.signed_balance(AccountType.ASSET, Decimal("25.25"), Decimal("125.50"))
        assert forward == -swapped


class TestComputeBalances:
    """Aggregation of journal lines into per-account balances."""

    def test_cash_and_revenue(self, chart, make_line):
        lines = [
            make_line(chart["cash"], debit="1000.00"),
            make_line(chart["sales"], credit="1000.00"),
            make_line(chart["cash"], credit="250.00"),
        ]
        balances = compute_balances([chart["cash"], chart["sales"]], lines)

        cash, sales = balances
        assert cash.debits_total == Decimal("1000.00")
        assert cash.credits_total == Decimal("250.00")
        assert cash.current_balance == Decimal("750.00")
        assert cash.normal_balance == NormalBalance.DEBIT
        assert sales.current_balance == Decimal("1000.00")
        assert sales.normal_balance == NormalBalance.CREDIT

    def test_zero_activity_accounts_are_reported(self, chart):
        balances = compute_balances([chart["cash"], chart["rent"]], [])

        assert len(balances) == 2
        assert all(b.current_balance == Decimal("0") for b in balances)
        assert all(b.debits_total == Decimal("0") for b in balances)

    def test_preserves_account_order(self, chart):
        accounts = [chart["rent"], chart["cash"], chart["sales"]]
        balances = compute_balances(accounts, [])
        assert [b.account_code for b in balances] == ["6100", "1000", "4000"]

    def test_missing_amounts_count_as_zero(self, chart, make_line):
        lines = [make_line(chart["rent"], debit="80.00"), make_line(chart["rent"])]
        balances = compute_balances([chart["rent"]], lines)
        assert balances[0].current_balance == Decimal("80.00")

    def test_lines_for_unknown_accounts_are_ignored(self, chart, make_line):
        lines = [
            make_line(chart["cash"], debit="40.00"),
            make_line(chart["bank"], debit="999.00"),
        ]
        balances = compute_balances([chart["cash"]], lines)

        assert len(balances) == 1
        assert balances[0].current_balance == Decimal("40.00")

    def test_balances_are_not_synthetic(self, chart, make_line):
        balances = compute_balances([chart["cash"]], [make_line(chart["cash"], debit="1")])
        assert balances[0].is_synthetic is False


class TestSumBalances:
    """Summing balances by account type."""

    def test_filter_by_type(self, chart, make_line):
        lines = [
            make_line(chart["rent"], debit="300.00"),
            make_line(chart["wages"], debit="200.00"),
            make_line(chart["cash"], credit="500.00"),
        ]
        balances = compute_balances([chart["cash"], chart["wages"], chart["rent"]], lines)

        assert BalanceCalculator.sum_balances(balances, AccountType.EXPENSE) == Decimal("500.00")
        assert BalanceCalculator.sum_balances(balances, AccountType.ASSET) == Decimal("-500.00")
        assert BalanceCalculator.sum_balances(balances) == Decimal("0.00")

    def test_empty(self):
        assert BalanceCalculator.sum_balances([]) == Decimal("0")
