"""
Restaurant Ledger - Chart of Accounts & General Ledger Models

Read-only mappings of the double-entry tables kept in the hosted store:
- Chart of Accounts (Assets, Liabilities, Equity, Revenue, Expenses, COGS)
- Journal Entries and their debit/credit lines

Financial statements are derived from these rows; nothing here is written
by this service.
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean, Date, ForeignKey, Numeric, String, Text, Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, CreatedAtMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.operations import Restaurant


# =============================================================================
# ENUMS
# =============================================================================

class AccountType(str, Enum):
    """Main account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    COGS = "cogs"


class AccountSubType(str, Enum):
    """Restaurant sub-types for detailed classification."""
    # Asset sub-types
    CASH = "cash"
    BANK = "bank"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    FIXED_ASSETS = "fixed_assets"
    OTHER_CURRENT_ASSETS = "other_current_assets"
    OTHER_ASSETS = "other_assets"
    PREPAID_EXPENSES = "prepaid_expenses"
    ACCUMULATED_DEPRECIATION = "accumulated_depreciation"

    # Liability sub-types
    ACCOUNTS_PAYABLE = "accounts_payable"
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    OTHER_CURRENT_LIABILITIES = "other_current_liabilities"
    LONG_TERM_LIABILITIES = "long_term_liabilities"
    PAYROLL_LIABILITIES = "payroll_liabilities"
    DEFERRED_REVENUE = "deferred_revenue"
    OTHER_LIABILITIES = "other_liabilities"

    # Equity sub-types
    OWNERS_EQUITY = "owners_equity"
    RETAINED_EARNINGS = "retained_earnings"
    DISTRIBUTIONS = "distributions"

    # Revenue sub-types
    SALES = "sales"
    OTHER_INCOME = "other_income"
    FOOD_SALES = "food_sales"
    BEVERAGE_SALES = "beverage_sales"
    ALCOHOL_SALES = "alcohol_sales"
    CATERING_INCOME = "catering_income"

    # COGS sub-types
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    FOOD_COST = "food_cost"
    BEVERAGE_COST = "beverage_cost"
    PACKAGING_COST = "packaging_cost"

    # Expense sub-types
    OPERATING_EXPENSES = "operating_expenses"
    PAYROLL = "payroll"
    LABOR = "labor"
    TAX_EXPENSE = "tax_expense"
    OTHER_EXPENSES = "other_expenses"
    RENT = "rent"
    UTILITIES = "utilities"
    MARKETING = "marketing"
    INSURANCE = "insurance"
    REPAIRS_MAINTENANCE = "repairs_maintenance"
    PROFESSIONAL_FEES = "professional_fees"
    DEPRECIATION = "depreciation"


class NormalBalance(str, Enum):
    """Normal balance direction."""
    DEBIT = "debit"
    CREDIT = "credit"


# =============================================================================
# CHART OF ACCOUNTS
# =============================================================================

class ChartOfAccounts(BaseModel, TimestampMixin):
    """
    Chart of Accounts entry for a restaurant.

    Account management happens elsewhere; statements only read
    code, name, type, subtype and normal balance.
    """

    __tablename__ = "chart_of_accounts"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Account Identification
    account_code: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="Display ordering key (e.g., 1000, 2100, 4000)",
    )
    account_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Classification (stored as text enums in the hosted store)
    account_type: Mapped[str] = mapped_column(String(20), nullable=False)
    account_subtype: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    normal_balance: Mapped[str] = mapped_column(String(10), nullable=False)

    # Hierarchy
    parent_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chart_of_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Cached balance maintained by the store; statements recompute from lines
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )

    # System Flags
    is_system_account: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship("Restaurant")
    journal_lines: Mapped[List["JournalEntryLine"]] = relationship(
        "JournalEntryLine",
        back_populates="account",
    )

    __table_args__ = (
        Index('ix_coa_restaurant_type', 'restaurant_id', 'account_type'),
    )

    def __repr__(self) -> str:
        return f"<ChartOfAccounts({self.account_code}: {self.account_name})>"


# =============================================================================
# JOURNAL ENTRIES
# =============================================================================

class JournalEntry(BaseModel, TimestampMixin):
    """
    Journal Entry header.

    Lines carry the amounts; the header carries the date and the
    restaurant scope used to filter statement windows.
    """

    __tablename__ = "journal_entries"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    entry_number: Mapped[str] = mapped_column(String(50), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    # Source document link (e.g. reference_type='bank_transaction')
    reference_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Totals (for quick reference)
    total_debit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    total_credit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    is_balanced: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    # Relationships
    lines: Mapped[List["JournalEntryLine"]] = relationship(
        "JournalEntryLine",
        back_populates="journal_entry",
    )

    __table_args__ = (
        Index('ix_je_restaurant_date', 'restaurant_id', 'entry_date'),
    )

    def __repr__(self) -> str:
        return f"<JournalEntry({self.entry_number}: {self.description[:50]})>"


class JournalEntryLine(BaseModel, CreatedAtMixin):
    """
    Individual line item in a journal entry.
    Each line is either a debit or credit to a specific account.
    """

    __tablename__ = "journal_entry_lines"

    journal_entry_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Amount (one or the other, not both)
    debit_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=True,
    )
    credit_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=True,
    )

    # Relationships
    journal_entry: Mapped["JournalEntry"] = relationship(
        "JournalEntry", back_populates="lines",
    )
    account: Mapped["ChartOfAccounts"] = relationship(
        "ChartOfAccounts", back_populates="journal_lines",
    )

    def __repr__(self) -> str:
        return f"<JournalEntryLine(account={self.account_id}, dr={self.debit_amount}, cr={self.credit_amount})>"
