"""
Restaurant Ledger - Account Balance Calculator

Aggregates journal lines into signed per-account balances.

Sign rule (normal balance side is positive):
- Asset, Expense, COGS: debits - credits
- Liability, Equity, Revenue: credits - debits
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from app.models.accounting import AccountType, NormalBalance
from app.schemas.accounting import (
    DEBIT_NORMAL_TYPES,
    AccountBalance,
    AccountSnapshot,
    JournalLineSnapshot,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class BalanceCalculator:
    """
    Balance aggregation utilities.

    Every account passed in yields exactly one balance, even with no
    activity. Lines that reference an account outside the supplied set
    are skipped.
    """

    @staticmethod
    def normal_balance_for(account_type: AccountType) -> NormalBalance:
        """Debit for asset/expense/cogs, credit for everything else."""
        if account_type in DEBIT_NORMAL_TYPES:
            return NormalBalance.DEBIT
        return NormalBalance.CREDIT

    @staticmethod
    def signed_balance(
        account_type: AccountType,
        debits: Decimal,
        credits: Decimal,
    ) -> Decimal:
        if account_type in DEBIT_NORMAL_TYPES:
            return debits - credits
        return credits - debits

    @classmethod
    def compute_balances(
        cls,
        accounts: Iterable[AccountSnapshot],
        lines: Iterable[JournalLineSnapshot],
    ) -> List[AccountBalance]:
        """
        Compute the signed balance of every account from its journal lines.

        Args:
            accounts: Accounts to report on (order is preserved)
            lines: Journal lines already filtered to the date window

        Returns:
            One AccountBalance per account
        """
        accounts = list(accounts)
        debits: Dict[str, Decimal] = {str(a.id): ZERO for a in accounts}
        credits: Dict[str, Decimal] = {str(a.id): ZERO for a in accounts}

        skipped = 0
        for line in lines:
            key = str(line.account_id)
            if key not in debits:
                skipped += 1
                continue
            debits[key] += line.debit_amount or ZERO
            credits[key] += line.credit_amount or ZERO

        if skipped:
            logger.debug(f"Ignored {skipped} journal lines for accounts outside the report scope")

        balances = []
        for account in accounts:
            key = str(account.id)
            balances.append(AccountBalance(
                account_id=account.id,
                account_code=account.account_code,
                account_name=account.account_name,
                account_type=account.account_type,
                account_subtype=account.account_subtype,
                normal_balance=account.normal_balance or cls.normal_balance_for(account.account_type),
                debits_total=debits[key],
                credits_total=credits[key],
                current_balance=cls.signed_balance(account.account_type, debits[key], credits[key]),
            ))
        return balances

    @staticmethod
    def sum_balances(
        balances: Iterable[AccountBalance],
        account_type: Optional[AccountType] = None,
    ) -> Decimal:
        """Sum current_balance, optionally restricted to one account type."""
        return sum(
            (
                b.current_balance for b in balances
                if account_type is None or b.account_type == account_type
            ),
            ZERO,
        )
