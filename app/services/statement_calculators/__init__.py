"""
Restaurant Ledger - Statement Calculators Package

Pure calculation modules behind the financial statements. Nothing here
touches the database.

Modules:
- balances: per-account signed balances from journal lines
- classification: payroll, cash and POS revenue category rules
- accruals: synthetic unposted inventory usage and payroll entries
- statements: trial balance, income statement, balance sheet, cash flow
- revenue_breakdown: POS net sales revenue excluding pass-through collections
"""

from decimal import Decimal
from typing import Iterable, List

from app.schemas.accounting import AccountBalance, AccountSnapshot, JournalLineSnapshot
from app.services.statement_calculators.balances import BalanceCalculator, ZERO
from app.services.statement_calculators.classification import AccountClassifier, RevenueCategoryType
from app.services.statement_calculators.accruals import AccrualGapFiller
from app.services.statement_calculators.statements import StatementComposer, DEFAULT_TOLERANCE
from app.services.statement_calculators.revenue_breakdown import RevenueBreakdownCalculator


# ===========================================
# CONVENIENCE FUNCTIONS
# ===========================================

def compute_balances(
    accounts: Iterable[AccountSnapshot],
    lines: Iterable[JournalLineSnapshot],
) -> List[AccountBalance]:
    """
    Compute signed account balances.

    Args:
        accounts: Chart of accounts rows
        lines: Journal lines within the reporting window

    Returns:
        One balance per account, in account order
    """
    return BalanceCalculator.compute_balances(accounts, lines)


def fill_accrual_gaps(
    balances: Iterable[AccountBalance],
    usage_cost: Decimal = ZERO,
    payroll_cost: Decimal = ZERO,
    strict_mode: bool = False,
) -> List[AccountBalance]:
    """
    Add unposted inventory usage and payroll entries where the GL is silent.

    Args:
        balances: GL balances
        usage_cost: Inventory usage cost (magnitude)
        payroll_cost: Labor cost (magnitude)
        strict_mode: GL-only; nothing is added

    Returns:
        New list of balances
    """
    return AccrualGapFiller.fill_accrual_gaps(balances, usage_cost, payroll_cost, strict_mode)


def compute_net_income(balances: Iterable[AccountBalance]) -> Decimal:
    """Net income over GL revenue, COGS and expenses."""
    return StatementComposer.compute_net_income(balances)


__all__ = [
    "BalanceCalculator",
    "AccountClassifier",
    "RevenueCategoryType",
    "AccrualGapFiller",
    "StatementComposer",
    "RevenueBreakdownCalculator",
    "DEFAULT_TOLERANCE",
    "ZERO",
    "compute_balances",
    "fill_accrual_gaps",
    "compute_net_income",
]
