"""
Restaurant Ledger - Accounting Schemas

Pydantic schemas for the ledger data the statement calculators consume:
account snapshots, journal line snapshots and computed account balances.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator

from app.models.accounting import AccountType, NormalBalance


# Account ids are opaque: UUIDs from the store, plain strings for
# synthetic accrual entries.
AccountId = Union[UUID, str]

DEBIT_NORMAL_TYPES = frozenset({
    AccountType.ASSET,
    AccountType.EXPENSE,
    AccountType.COGS,
})


# =============================================================================
# LEDGER SNAPSHOTS
# =============================================================================

class AccountSnapshot(BaseModel):
    """A chart of accounts row as read from the store."""
    model_config = ConfigDict(from_attributes=True)

    id: AccountId
    account_code: str
    account_name: str
    account_type: AccountType
    account_subtype: Optional[str] = None
    normal_balance: Optional[NormalBalance] = None
    is_active: bool = True

    @model_validator(mode="after")
    def default_normal_balance(self) -> "AccountSnapshot":
        if self.normal_balance is None:
            self.normal_balance = (
                NormalBalance.DEBIT
                if self.account_type in DEBIT_NORMAL_TYPES
                else NormalBalance.CREDIT
            )
        return self


class JournalLineSnapshot(BaseModel):
    """A single debit/credit posting. Missing amounts count as zero."""
    model_config = ConfigDict(from_attributes=True)

    account_id: AccountId
    debit_amount: Optional[Decimal] = None
    credit_amount: Optional[Decimal] = None
    entry_date: Optional[date] = None


# =============================================================================
# COMPUTED BALANCES
# =============================================================================

class AccountBalance(BaseModel):
    """
    Signed balance of one account over a date window.

    current_balance follows the account type's sign rule:
    debits - credits for asset/expense/cogs, credits - debits otherwise.
    Synthetic accrual entries carry one of the is_* flags and never
    correspond to a stored account.
    """
    account_id: AccountId
    account_code: str
    account_name: str
    account_type: AccountType
    account_subtype: Optional[str] = None
    normal_balance: NormalBalance
    debits_total: Decimal = Decimal("0.00")
    credits_total: Decimal = Decimal("0.00")
    current_balance: Decimal = Decimal("0.00")
    is_inventory_usage: bool = False
    is_payroll_fallback: bool = False

    @property
    def is_synthetic(self) -> bool:
        return self.is_inventory_usage or self.is_payroll_fallback
