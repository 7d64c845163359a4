"""
Accrual Gap-Filler Tests

Synthetic inventory usage and unposted payroll entries.
"""

from decimal import Decimal

from app.models.accounting import AccountType
from app.services.statement_calculators import (
    AccrualGapFiller,
    StatementComposer,
    compute_balances,
    fill_accrual_gaps,
)
from app.services.statement_calculators.accruals import (
    INVENTORY_USAGE_ACCOUNT_ID,
    PAYROLL_ACCRUAL_ACCOUNT_ID,
    PAYROLL_EXPENSE_ACCOUNT_ID,
)


class TestInventoryUsage:
    """Inventory usage becomes COGS only when no COGS is journaled."""

    def test_adds_usage_when_cogs_unjournaled(self, chart):
        balances = compute_balances([chart["inventory"], chart["food_cost"]], [])
        result = fill_accrual_gaps(balances, usage_cost=Decimal("450.00"))

        assert len(result) == 3
        usage = result[-1]
        assert usage.account_id == INVENTORY_USAGE_ACCOUNT_ID
        assert usage.account_type == AccountType.ASSET
        assert usage.current_balance == Decimal("-450.00")
        assert usage.credits_total == Decimal("450.00")
        assert usage.is_inventory_usage is True
        assert usage.is_synthetic is True

    def test_skipped_when_cogs_journaled(self, chart, make_line):
        lines = [
            make_line(chart["food_cost"], debit="300.00"),
            make_line(chart["inventory"], credit="300.00"),
        ]
        balances = compute_balances([chart["inventory"], chart["food_cost"]], lines)
        result = fill_accrual_gaps(balances, usage_cost=Decimal("450.00"))

        assert not any(b.is_inventory_usage for b in result)
        assert len(result) == 2

    def test_zero_usage_adds_nothing(self, chart):
        balances = compute_balances([chart["food_cost"]], [])
        assert fill_accrual_gaps(balances, usage_cost=Decimal("0")) == balances

    def test_usage_cost_is_a_magnitude(self):
        assert AccrualGapFiller.usage_cost_from_total(Decimal("-275.40")) == Decimal("275.40")
        assert AccrualGapFiller.usage_cost_from_total(None) == Decimal("0")

    def test_usage_flows_into_cogs(self, chart):
        balances = fill_accrual_gaps(
            compute_balances([chart["inventory"], chart["food_cost"]], []),
            usage_cost=Decimal("450.00"),
        )
        parts = StatementComposer.income_components(balances)

        assert parts["journaled_cogs"] == Decimal("0.00")
        assert parts["inventory_usage_adjustment"] == Decimal("450.00")
        assert parts["total_cogs"] == Decimal("450.00")


class TestPayrollFallback:
    """Unposted labor cost becomes an expense plus accrued liability."""

    def test_adds_expense_and_liability_pair(self, chart):
        balances = compute_balances([chart["wages"], chart["payroll_liability"]], [])
        result = fill_accrual_gaps(balances, payroll_cost=Decimal("1000.00"))

        synthetic = [b for b in result if b.is_payroll_fallback]
        assert [b.account_id for b in synthetic] == [PAYROLL_EXPENSE_ACCOUNT_ID, PAYROLL_ACCRUAL_ACCOUNT_ID]
        expense, accrual = synthetic
        assert expense.account_type == AccountType.EXPENSE
        assert expense.current_balance == Decimal("1000.00")
        assert accrual.account_type == AccountType.LIABILITY
        assert accrual.current_balance == Decimal("1000.00")

    def test_skipped_when_payroll_journaled(self, chart, make_line):
        lines = [
            make_line(chart["wages"], debit="640.00"),
            make_line(chart["cash"], credit="640.00"),
        ]
        balances = compute_balances([chart["cash"], chart["wages"]], lines)
        result = fill_accrual_gaps(balances, payroll_cost=Decimal("1000.00"))

        assert not any(b.is_payroll_fallback for b in result)

    def test_payroll_detected_by_name(self, make_account, make_line):
        salaries = make_account("6050", "Manager Salaries", AccountType.EXPENSE)
        balances = compute_balances([salaries], [make_line(salaries, debit="500.00")])

        assert AccrualGapFiller.journaled_payroll(balances) == Decimal("500.00")

    def test_payroll_cost_combines_hourly_and_allocations(self):
        cost = AccrualGapFiller.payroll_cost_from_totals(Decimal("200.00"), Decimal("800.00"))
        assert cost == Decimal("1000.00")

    def test_balance_sheet_stays_balanced(self, chart, make_line):
        """Assets 1000 = liabilities 200 + equity 800 after unposted payroll of 200."""
        accounts = [chart["cash"], chart["payroll_liability"], chart["owner_equity"], chart["sales"], chart["wages"]]
        lines = [
            make_line(chart["cash"], debit="1000.00"),
            make_line(chart["sales"], credit="1000.00"),
        ]
        balances = fill_accrual_gaps(
            compute_balances(accounts, lines),
            payroll_cost=AccrualGapFiller.payroll_cost_from_totals(Decimal("150.00"), Decimal("50.00")),
        )
        report = StatementComposer.compose_balance_sheet(balances)

        assert report.total_assets == Decimal("1000.00")
        assert report.total_liabilities == Decimal("200.00")
        assert report.total_equity == Decimal("800.00")
        assert report.is_balanced is True


class TestStrictMode:
    """GL-only reporting never adds synthetic entries."""

    def test_strict_mode_returns_gl_balances(self, chart):
        balances = compute_balances([chart["inventory"], chart["food_cost"], chart["wages"]], [])
        result = fill_accrual_gaps(
            balances,
            usage_cost=Decimal("450.00"),
            payroll_cost=Decimal("1000.00"),
            strict_mode=True,
        )

        assert result == balances
        assert result is not balances
        assert not any(b.is_synthetic for b in result)

    def test_input_is_not_modified(self, chart):
        balances = compute_balances([chart["food_cost"]], [])
        fill_accrual_gaps(balances, usage_cost=Decimal("10.00"))
        assert len(balances) == 1

    def test_exclude_synthetic(self, chart):
        balances = fill_accrual_gaps(
            compute_balances([chart["food_cost"], chart["wages"]], []),
            usage_cost=Decimal("10.00"),
            payroll_cost=Decimal("20.00"),
        )
        assert len(balances) == 5
        assert len(AccrualGapFiller.exclude_synthetic(balances)) == 2
