"""
Restaurant Ledger - Statement Composers

Build Trial Balance, Income Statement, Balance Sheet and Cash Flow reports
from computed account balances. Composers never raise for unbalanced books:
an imbalance beyond the tolerance becomes a warning on the report.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from app.models.accounting import AccountType, NormalBalance
from app.schemas.accounting import AccountBalance, AccountSnapshot, JournalLineSnapshot
from app.schemas.financial_statements import (
    BalanceSheetReport,
    CashAccountActivity,
    CashFlowCategory,
    CashFlowItem,
    CashFlowStatementReport,
    IncomeStatementReport,
    RevenueBreakdown,
    RevenueSource,
    StatementLineItem,
    TrialBalanceItem,
    TrialBalanceReport,
)
from app.services.statement_calculators.balances import ZERO, BalanceCalculator
from app.services.statement_calculators.classification import AccountClassifier
from app.utils.formatting import format_currency

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = Decimal("0.01")
CURRENT_PERIOD_NET_INCOME_ID = "current-period-net-income"
CURRENT_PERIOD_NET_INCOME_NAME = "Current Period Net Income"


def _line_item(balance: AccountBalance) -> StatementLineItem:
    return StatementLineItem(
        account_id=balance.account_id,
        account_code=balance.account_code,
        account_name=balance.account_name,
        account_subtype=balance.account_subtype,
        amount=balance.current_balance,
        is_inventory_usage=balance.is_inventory_usage,
        is_payroll_fallback=balance.is_payroll_fallback,
    )


def _of_type(balances: Iterable[AccountBalance], account_type: AccountType) -> List[AccountBalance]:
    return [b for b in balances if b.account_type == account_type]


class StatementComposer:
    """Pure report builders over AccountBalance lists."""

    # ===========================================
    # TRIAL BALANCE
    # ===========================================

    @staticmethod
    def compose_trial_balance(
        balances: Iterable[AccountBalance],
        tolerance: Decimal = DEFAULT_TOLERANCE,
        restaurant_id: Optional[UUID] = None,
        as_of_date: Optional[date] = None,
    ) -> TrialBalanceReport:
        """
        Place each account in the column of its normal balance.

        The amount shown is the net on the normal side, so a cash account
        that is overdrawn shows a negative debit rather than moving to the
        credit column.
        """
        items = []
        total_debits = ZERO
        total_credits = ZERO

        for balance in balances:
            if balance.normal_balance == NormalBalance.DEBIT:
                debit_balance = balance.debits_total - balance.credits_total
                credit_balance = ZERO
            else:
                debit_balance = ZERO
                credit_balance = balance.credits_total - balance.debits_total

            total_debits += debit_balance
            total_credits += credit_balance
            items.append(TrialBalanceItem(
                account_id=balance.account_id,
                account_code=balance.account_code,
                account_name=balance.account_name,
                account_type=balance.account_type,
                normal_balance=balance.normal_balance,
                debit_balance=debit_balance,
                credit_balance=credit_balance,
            ))

        difference = total_debits - total_credits
        is_balanced = abs(difference) <= tolerance
        warnings = []
        if not is_balanced:
            message = f"Trial balance is out of balance! Difference: {format_currency(abs(difference))}"
            logger.warning(message)
            warnings.append(message)

        return TrialBalanceReport(
            restaurant_id=restaurant_id,
            as_of_date=as_of_date,
            items=items,
            total_debits=total_debits,
            total_credits=total_credits,
            difference=difference,
            is_balanced=is_balanced,
            warnings=warnings,
        )

    # ===========================================
    # INCOME STATEMENT
    # ===========================================

    @staticmethod
    def income_components(balances: Iterable[AccountBalance]) -> Dict[str, Decimal]:
        """
        GL-based income figures shared by the income statement and the
        balance sheet's current period net income.

        COGS is reported as a magnitude: journaled COGS plus any inventory
        usage adjustment, whose asset balance is negative.
        """
        balances = list(balances)
        gl_revenue = BalanceCalculator.sum_balances(balances, AccountType.REVENUE)
        journaled_cogs = BalanceCalculator.sum_balances(balances, AccountType.COGS)
        inventory_usage_adjustment = -sum(
            (b.current_balance for b in balances if b.is_inventory_usage), ZERO
        )
        total_cogs = abs(journaled_cogs + inventory_usage_adjustment)
        total_expenses = BalanceCalculator.sum_balances(balances, AccountType.EXPENSE)
        return {
            "gl_revenue": gl_revenue,
            "journaled_cogs": journaled_cogs,
            "inventory_usage_adjustment": inventory_usage_adjustment,
            "total_cogs": total_cogs,
            "total_expenses": total_expenses,
        }

    @classmethod
    def compute_net_income(cls, balances: Iterable[AccountBalance]) -> Decimal:
        """Revenue - COGS - expenses, using GL revenue."""
        parts = cls.income_components(balances)
        return parts["gl_revenue"] - parts["total_cogs"] - parts["total_expenses"]

    @classmethod
    def compose_income_statement(
        cls,
        balances: Iterable[AccountBalance],
        revenue_breakdown: Optional[RevenueBreakdown] = None,
        restaurant_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        gl_only: bool = False,
    ) -> IncomeStatementReport:
        """
        Compose the income statement.

        When a revenue breakdown with categorized POS sales is supplied,
        its net revenue replaces GL revenue as the top line.
        """
        balances = list(balances)
        parts = cls.income_components(balances)

        use_pos = revenue_breakdown is not None and revenue_breakdown.has_categorization_data
        if use_pos:
            total_revenue = revenue_breakdown.totals.net_revenue
            revenue_source = RevenueSource.POS
        else:
            total_revenue = parts["gl_revenue"]
            revenue_source = RevenueSource.GL

        gross_profit = total_revenue - parts["total_cogs"]
        net_income = gross_profit - parts["total_expenses"]

        return IncomeStatementReport(
            restaurant_id=restaurant_id,
            start_date=start_date,
            end_date=end_date,
            gl_only=gl_only,
            revenue_items=[_line_item(b) for b in _of_type(balances, AccountType.REVENUE)],
            cogs_items=[_line_item(b) for b in _of_type(balances, AccountType.COGS)],
            expense_items=[_line_item(b) for b in _of_type(balances, AccountType.EXPENSE)],
            gl_revenue=parts["gl_revenue"],
            total_revenue=total_revenue,
            revenue_source=revenue_source,
            revenue_breakdown=revenue_breakdown,
            journaled_cogs=parts["journaled_cogs"],
            inventory_usage_adjustment=parts["inventory_usage_adjustment"],
            total_cogs=parts["total_cogs"],
            gross_profit=gross_profit,
            total_expenses=parts["total_expenses"],
            net_income=net_income,
        )

    # ===========================================
    # BALANCE SHEET
    # ===========================================

    @classmethod
    def compose_balance_sheet(
        cls,
        balances: Iterable[AccountBalance],
        tolerance: Decimal = DEFAULT_TOLERANCE,
        restaurant_id: Optional[UUID] = None,
        as_of_date: Optional[date] = None,
        gl_only: bool = False,
    ) -> BalanceSheetReport:
        """
        Compose the balance sheet.

        Revenue, COGS and expense balances are rolled into equity as a
        "Current Period Net Income" line, so the balances passed in must
        cover every account type, not just the balance sheet ones.
        """
        balances = list(balances)
        assets = _of_type(balances, AccountType.ASSET)
        liabilities = _of_type(balances, AccountType.LIABILITY)
        equity = _of_type(balances, AccountType.EQUITY)

        net_income = cls.compute_net_income(balances)
        equity_items = [_line_item(b) for b in equity]
        equity_items.append(StatementLineItem(
            account_id=CURRENT_PERIOD_NET_INCOME_ID,
            account_code="",
            account_name=CURRENT_PERIOD_NET_INCOME_NAME,
            amount=net_income,
        ))

        total_assets = BalanceCalculator.sum_balances(assets)
        total_liabilities = BalanceCalculator.sum_balances(liabilities)
        total_equity = BalanceCalculator.sum_balances(equity) + net_income
        total_liabilities_and_equity = total_liabilities + total_equity

        difference = total_assets - total_liabilities_and_equity
        is_balanced = abs(difference) <= tolerance
        warnings = []
        if not is_balanced:
            message = f"Balance Sheet doesn't balance! Difference: {format_currency(abs(difference))}"
            logger.warning(message)
            warnings.append(message)

        return BalanceSheetReport(
            restaurant_id=restaurant_id,
            as_of_date=as_of_date,
            gl_only=gl_only,
            assets=[_line_item(b) for b in assets],
            liabilities=[_line_item(b) for b in liabilities],
            equity=equity_items,
            current_period_net_income=net_income,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
            total_liabilities_and_equity=total_liabilities_and_equity,
            difference=difference,
            is_balanced=is_balanced,
            warnings=warnings,
        )

    # ===========================================
    # CASH FLOW
    # ===========================================

    @staticmethod
    def compose_cash_flow(
        accounts: Iterable[AccountSnapshot],
        period_lines: Iterable[JournalLineSnapshot],
        opening_lines: Iterable[JournalLineSnapshot] = (),
        restaurant_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CashFlowStatementReport:
        """
        Direct cash flow from cash and bank account postings.

        Args:
            accounts: Chart of accounts; cash accounts are picked out here
            period_lines: Lines dated within the period
            opening_lines: Lines dated before the period (beginning cash)

        The whole net change is reported as operating activity.
        """
        cash_accounts = [a for a in accounts if AccountClassifier.is_cash_account(a)]
        opening = BalanceCalculator.compute_balances(cash_accounts, opening_lines)
        period = BalanceCalculator.compute_balances(cash_accounts, period_lines)

        activity = []
        for start, movement in zip(opening, period):
            activity.append(CashAccountActivity(
                account_id=movement.account_id,
                account_code=movement.account_code,
                account_name=movement.account_name,
                beginning_balance=start.current_balance,
                net_change=movement.current_balance,
                ending_balance=start.current_balance + movement.current_balance,
            ))

        net_change = sum((a.net_change for a in activity), ZERO)
        beginning_cash = sum((a.beginning_balance for a in activity), ZERO)

        warnings = []
        if not cash_accounts:
            warnings.append("No cash or bank accounts found in the chart of accounts.")

        return CashFlowStatementReport(
            restaurant_id=restaurant_id,
            start_date=start_date,
            end_date=end_date,
            cash_accounts=activity,
            operating_items=[CashFlowItem(
                description="Net cash from operating activities",
                amount=net_change,
                category=CashFlowCategory.OPERATING,
            )],
            operating_activities_total=net_change,
            investing_activities_total=ZERO,
            financing_activities_total=ZERO,
            net_change_in_cash=net_change,
            beginning_cash=beginning_cash,
            ending_cash=beginning_cash + net_change,
            is_simplified=True,
            warnings=warnings,
        )
