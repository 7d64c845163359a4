"""
Restaurant Ledger - Accrual Gap-Filler

Adds synthetic "unposted" balances when operational data shows a cost that
has not been journaled yet:
- Inventory usage with no COGS postings: an asset reduction equal to the
  usage cost, surfaced as COGS on the income statement.
- Labor cost with no payroll expense postings: a payroll expense and a
  matching accrued liability, so the balance sheet stays balanced.

In strict (GL-only) mode nothing is added.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from app.models.accounting import AccountType, NormalBalance
from app.schemas.accounting import AccountBalance
from app.services.statement_calculators.balances import ZERO, BalanceCalculator
from app.services.statement_calculators.classification import AccountClassifier

logger = logging.getLogger(__name__)


INVENTORY_USAGE_ACCOUNT_ID = "synthetic-inventory-usage"
INVENTORY_USAGE_ACCOUNT_NAME = "Inventory Usage Adjustment"
PAYROLL_EXPENSE_ACCOUNT_ID = "synthetic-payroll-expense"
PAYROLL_EXPENSE_ACCOUNT_NAME = "Payroll Expense (unposted)"
PAYROLL_ACCRUAL_ACCOUNT_ID = "synthetic-payroll-accrual"
PAYROLL_ACCRUAL_ACCOUNT_NAME = "Payroll Accrual (unposted)"


class AccrualGapFiller:
    """Synthetic accrual entries for costs missing from the general ledger."""

    @staticmethod
    def usage_cost_from_total(total: Optional[Decimal]) -> Decimal:
        """Usage rows store consumed cost as an outflow; report its magnitude."""
        return abs(total or ZERO)

    @staticmethod
    def payroll_cost_from_totals(
        hourly_total: Optional[Decimal],
        allocation_total: Optional[Decimal],
    ) -> Decimal:
        """Hourly wages from time punches plus salary/contractor allocations."""
        return abs(hourly_total or ZERO) + abs(allocation_total or ZERO)

    @staticmethod
    def journaled_cogs(balances: Iterable[AccountBalance]) -> Decimal:
        return BalanceCalculator.sum_balances(
            [b for b in balances if not b.is_synthetic], AccountType.COGS
        )

    @staticmethod
    def journaled_payroll(balances: Iterable[AccountBalance]) -> Decimal:
        return sum(
            (
                b.current_balance for b in balances
                if not b.is_synthetic and AccountClassifier.is_payroll_account(b)
            ),
            ZERO,
        )

    @staticmethod
    def exclude_synthetic(balances: Iterable[AccountBalance]) -> List[AccountBalance]:
        """GL-only view of a balance list."""
        return [b for b in balances if not b.is_synthetic]

    @staticmethod
    def inventory_usage_entry(usage_cost: Decimal) -> AccountBalance:
        return AccountBalance(
            account_id=INVENTORY_USAGE_ACCOUNT_ID,
            account_code="",
            account_name=INVENTORY_USAGE_ACCOUNT_NAME,
            account_type=AccountType.ASSET,
            account_subtype="inventory",
            normal_balance=NormalBalance.DEBIT,
            credits_total=usage_cost,
            current_balance=-usage_cost,
            is_inventory_usage=True,
        )

    @staticmethod
    def payroll_fallback_entries(payroll_cost: Decimal) -> List[AccountBalance]:
        """Expense and accrued liability, always emitted together."""
        return [
            AccountBalance(
                account_id=PAYROLL_EXPENSE_ACCOUNT_ID,
                account_code="",
                account_name=PAYROLL_EXPENSE_ACCOUNT_NAME,
                account_type=AccountType.EXPENSE,
                account_subtype="payroll",
                normal_balance=NormalBalance.DEBIT,
                debits_total=payroll_cost,
                current_balance=payroll_cost,
                is_payroll_fallback=True,
            ),
            AccountBalance(
                account_id=PAYROLL_ACCRUAL_ACCOUNT_ID,
                account_code="",
                account_name=PAYROLL_ACCRUAL_ACCOUNT_NAME,
                account_type=AccountType.LIABILITY,
                account_subtype="payroll_liabilities",
                normal_balance=NormalBalance.CREDIT,
                credits_total=payroll_cost,
                current_balance=payroll_cost,
                is_payroll_fallback=True,
            ),
        ]

    @classmethod
    def fill_accrual_gaps(
        cls,
        balances: Iterable[AccountBalance],
        usage_cost: Decimal = ZERO,
        payroll_cost: Decimal = ZERO,
        strict_mode: bool = False,
    ) -> List[AccountBalance]:
        """
        Append synthetic accrual entries for unjournaled inventory usage
        and payroll.

        Args:
            balances: GL balances (not modified)
            usage_cost: Inventory usage cost for the window, as a magnitude
            payroll_cost: Labor cost for the window, as a magnitude
            strict_mode: GL-only reporting; return the balances unchanged

        Returns:
            A new list: the input balances followed by any synthetic entries
        """
        result = list(balances)
        if strict_mode:
            return result

        if usage_cost > ZERO:
            if cls.journaled_cogs(result) == ZERO:
                logger.info(f"No COGS journaled; adding inventory usage adjustment of {usage_cost}")
                result.append(cls.inventory_usage_entry(usage_cost))

        if payroll_cost > ZERO:
            if cls.journaled_payroll(result) == ZERO:
                logger.info(f"No payroll expense journaled; adding unposted payroll of {payroll_cost}")
                result.extend(cls.payroll_fallback_entries(payroll_cost))

        return result
