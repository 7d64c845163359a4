"""
Restaurant Ledger - Financial Statement Schemas

Pydantic schemas for Trial Balance, Income Statement, Balance Sheet,
Cash Flow Statement and the POS revenue breakdown.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.accounting import AccountType, NormalBalance
from app.schemas.accounting import AccountId


# =============================================================================
# SHARED
# =============================================================================

class StatementLineItem(BaseModel):
    """Single account line on an income statement or balance sheet."""
    account_id: AccountId
    account_code: str
    account_name: str
    account_subtype: Optional[str] = None
    amount: Decimal
    is_inventory_usage: bool = False
    is_payroll_fallback: bool = False


# =============================================================================
# TRIAL BALANCE
# =============================================================================

class TrialBalanceItem(BaseModel):
    """Item in trial balance report."""
    account_id: AccountId
    account_code: str
    account_name: str
    account_type: AccountType
    normal_balance: NormalBalance
    debit_balance: Decimal
    credit_balance: Decimal


class TrialBalanceReport(BaseModel):
    """Trial balance report."""
    restaurant_id: Optional[UUID] = None
    as_of_date: Optional[date] = None
    items: List[TrialBalanceItem]
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    warnings: List[str] = []


# =============================================================================
# REVENUE BREAKDOWN
# =============================================================================

class RevenueCategory(BaseModel):
    """Categorized POS sales summed per revenue (or contra/liability) account."""
    account_id: AccountId
    account_code: str
    account_name: str
    account_type: AccountType
    account_subtype: Optional[str] = None
    total_amount: Decimal
    transaction_count: int = 0


class PassThroughTotal(BaseModel):
    """POS adjustment lines (tax, tip, discount, ...) summed by type."""
    adjustment_type: str
    total_amount: Decimal
    transaction_count: int = 0


class RevenueBreakdownTotals(BaseModel):
    """Roll-up of the revenue breakdown."""
    total_collected_at_pos: Decimal
    gross_revenue: Decimal
    categorized_revenue: Decimal
    uncategorized_revenue: Decimal
    total_discounts: Decimal
    total_refunds: Decimal
    net_revenue: Decimal
    sales_tax: Decimal
    tips: Decimal
    other_liabilities: Decimal


class RevenueBreakdown(BaseModel):
    """POS revenue split into revenue, contra-revenue and pass-through amounts."""
    revenue_categories: List[RevenueCategory] = []
    discount_categories: List[RevenueCategory] = []
    refund_categories: List[RevenueCategory] = []
    tax_categories: List[RevenueCategory] = []
    tip_categories: List[RevenueCategory] = []
    other_liability_categories: List[RevenueCategory] = []
    adjustments: List[PassThroughTotal] = []
    uncategorized_revenue: Decimal = Decimal("0.00")
    totals: RevenueBreakdownTotals
    has_categorization_data: bool
    categorization_rate: Decimal = Field(
        ..., description="Share of gross revenue that is categorized, in percent"
    )


# =============================================================================
# INCOME STATEMENT
# =============================================================================

class RevenueSource(str, Enum):
    """Where total_revenue on the income statement came from."""
    GL = "gl"
    POS = "pos"


class IncomeStatementReport(BaseModel):
    """Income statement (P&L) report."""
    restaurant_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    gl_only: bool = False

    revenue_items: List[StatementLineItem]
    cogs_items: List[StatementLineItem]
    expense_items: List[StatementLineItem]

    gl_revenue: Decimal
    total_revenue: Decimal
    revenue_source: RevenueSource = RevenueSource.GL
    revenue_breakdown: Optional[RevenueBreakdown] = None

    journaled_cogs: Decimal
    inventory_usage_adjustment: Decimal
    total_cogs: Decimal
    gross_profit: Decimal
    total_expenses: Decimal
    net_income: Decimal

    warnings: List[str] = []
    data_quality_notes: List[str] = []


# =============================================================================
# BALANCE SHEET
# =============================================================================

class BalanceSheetReport(BaseModel):
    """Balance sheet report."""
    restaurant_id: Optional[UUID] = None
    as_of_date: Optional[date] = None
    gl_only: bool = False

    assets: List[StatementLineItem]
    liabilities: List[StatementLineItem]
    equity: List[StatementLineItem]

    current_period_net_income: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    difference: Decimal
    is_balanced: bool

    warnings: List[str] = []
    data_quality_notes: List[str] = []


# =============================================================================
# CASH FLOW STATEMENT
# =============================================================================

class CashFlowCategory(str, Enum):
    """Cash flow statement categories."""
    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class CashFlowItem(BaseModel):
    """Single item in cash flow statement."""
    description: str
    amount: Decimal
    category: CashFlowCategory


class CashAccountActivity(BaseModel):
    """Movement of one cash or bank account over the period."""
    account_id: AccountId
    account_code: str
    account_name: str
    beginning_balance: Decimal
    net_change: Decimal
    ending_balance: Decimal


class CashFlowStatementReport(BaseModel):
    """
    Cash flow statement report.

    The net change in cash is derived directly from cash account postings
    and attributed entirely to operating activities; is_simplified marks
    that investing and financing are not separated.
    """
    restaurant_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    cash_accounts: List[CashAccountActivity]
    operating_items: List[CashFlowItem]
    operating_activities_total: Decimal
    investing_items: List[CashFlowItem] = []
    investing_activities_total: Decimal = Decimal("0.00")
    financing_items: List[CashFlowItem] = []
    financing_activities_total: Decimal = Decimal("0.00")

    net_change_in_cash: Decimal
    beginning_cash: Decimal
    ending_cash: Decimal
    is_simplified: bool = True

    warnings: List[str] = []


# =============================================================================
# EXPORTS
# =============================================================================

class ReportRow(BaseModel):
    """One rendered row of an exported statement."""
    label: str
    amount: Optional[Decimal] = None
    indent: int = 0
    is_bold: bool = False
    is_subtotal: bool = False
    is_total: bool = False
    is_section_header: bool = False
