"""
Restaurant Ledger - Account Classification

Maps account subtypes and name patterns to the canonical categories the
statement calculators care about:
- Payroll expense accounts (payroll fallback detection)
- Cash and bank accounts (cash flow statement)
- POS revenue categories: core revenue, discounts, refunds, sales tax,
  tips and other pass-through liabilities

Name matching is case-insensitive substring matching.
"""

from enum import Enum
from typing import Iterable, Optional, Protocol

from app.models.accounting import AccountType


class ClassifiableAccount(Protocol):
    """Anything with a type, optional subtype and a name."""
    account_type: AccountType
    account_subtype: Optional[str]
    account_name: str


class RevenueCategoryType(str, Enum):
    """Buckets used by the POS revenue breakdown."""
    REVENUE = "revenue"
    DISCOUNT = "discount"
    REFUND = "refund"
    SALES_TAX = "sales_tax"
    TIP = "tip"
    OTHER_LIABILITY = "other_liability"


PAYROLL_SUBTYPES = frozenset({"payroll", "labor"})
PAYROLL_NAME_PATTERNS = ("payroll", "wage", "salar")

CASH_SUBTYPES = frozenset({"cash", "bank"})
CASH_NAME_PATTERNS = ("cash",)

DISCOUNT_SUBTYPES = frozenset({"discounts"})
DISCOUNT_NAME_PATTERNS = ("discount", "comp")
REFUND_NAME_PATTERNS = ("refund", "return")
SALES_TAX_SUBTYPES = frozenset({"sales_tax"})
SALES_TAX_NAME_PATTERNS = ("tax",)
TIP_SUBTYPES = frozenset({"tips"})
TIP_NAME_PATTERNS = ("tip",)


def _name_matches(name: Optional[str], patterns: Iterable[str]) -> bool:
    lowered = (name or "").lower()
    return any(pattern in lowered for pattern in patterns)


def _type_value(account: ClassifiableAccount) -> str:
    account_type = account.account_type
    return account_type.value if isinstance(account_type, AccountType) else str(account_type)


class AccountClassifier:
    """
    Account classification rules.

    Subtype takes precedence; name patterns cover charts of accounts
    where subtypes were never filled in.
    """

    @staticmethod
    def is_payroll_account(account: ClassifiableAccount) -> bool:
        """Expense account holding wages, salaries or labor cost."""
        if _type_value(account) != AccountType.EXPENSE.value:
            return False
        if account.account_subtype in PAYROLL_SUBTYPES:
            return True
        return _name_matches(account.account_name, PAYROLL_NAME_PATTERNS)

    @staticmethod
    def is_cash_account(account: ClassifiableAccount) -> bool:
        """
        Asset account holding cash or bank balances.

        The name fallback only applies when no subtype is set, so an
        "Inventory - Cash & Carry" account with subtype inventory is not cash.
        """
        if _type_value(account) != AccountType.ASSET.value:
            return False
        if account.account_subtype:
            return account.account_subtype in CASH_SUBTYPES
        return _name_matches(account.account_name, CASH_NAME_PATTERNS)

    @staticmethod
    def is_discount_category(account: ClassifiableAccount) -> bool:
        return (
            account.account_subtype in DISCOUNT_SUBTYPES
            or _name_matches(account.account_name, DISCOUNT_NAME_PATTERNS)
        )

    @staticmethod
    def is_refund_category(account: ClassifiableAccount) -> bool:
        return _name_matches(account.account_name, REFUND_NAME_PATTERNS)

    @staticmethod
    def is_sales_tax_category(account: ClassifiableAccount) -> bool:
        if _type_value(account) != AccountType.LIABILITY.value:
            return False
        return (
            account.account_subtype in SALES_TAX_SUBTYPES
            or _name_matches(account.account_name, SALES_TAX_NAME_PATTERNS)
        )

    @staticmethod
    def is_tip_category(account: ClassifiableAccount) -> bool:
        if _type_value(account) != AccountType.LIABILITY.value:
            return False
        return (
            account.account_subtype in TIP_SUBTYPES
            or _name_matches(account.account_name, TIP_NAME_PATTERNS)
        )

    @staticmethod
    def is_other_liability_category(account: ClassifiableAccount) -> bool:
        """Liability that is neither sales tax nor tips (franchise fees, etc.)."""
        if _type_value(account) != AccountType.LIABILITY.value:
            return False
        if account.account_subtype in SALES_TAX_SUBTYPES or account.account_subtype in TIP_SUBTYPES:
            return False
        return not _name_matches(
            account.account_name, SALES_TAX_NAME_PATTERNS + TIP_NAME_PATTERNS
        )

    @classmethod
    def is_core_revenue_category(cls, account: ClassifiableAccount) -> bool:
        """Revenue account that is not a discount, refund or tax line."""
        if _type_value(account) != AccountType.REVENUE.value:
            return False
        if account.account_subtype in DISCOUNT_SUBTYPES or account.account_subtype in SALES_TAX_SUBTYPES:
            return False
        return not _name_matches(
            account.account_name,
            DISCOUNT_NAME_PATTERNS + ("refund",) + SALES_TAX_NAME_PATTERNS,
        )

    @classmethod
    def revenue_categories_for(cls, account: ClassifiableAccount) -> set:
        """
        All breakdown buckets an account falls into.

        Buckets are not exclusive: a revenue account named "Comps & Refunds"
        counts as both a discount and a refund.
        """
        buckets = set()
        if cls.is_core_revenue_category(account):
            buckets.add(RevenueCategoryType.REVENUE)
        if cls.is_discount_category(account):
            buckets.add(RevenueCategoryType.DISCOUNT)
        if cls.is_refund_category(account):
            buckets.add(RevenueCategoryType.REFUND)
        if cls.is_sales_tax_category(account):
            buckets.add(RevenueCategoryType.SALES_TAX)
        if cls.is_tip_category(account):
            buckets.add(RevenueCategoryType.TIP)
        if cls.is_other_liability_category(account):
            buckets.add(RevenueCategoryType.OTHER_LIABILITY)
        return buckets
