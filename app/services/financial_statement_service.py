"""
Restaurant Ledger - Financial Statement Service

Orchestrates ledger reads and the statement calculators:
- Trial Balance as of a date
- Income Statement for a period (POS revenue, unposted accruals)
- Balance Sheet as of a date (net income rolled into equity)
- Cash Flow Statement for a period

Chart of accounts and journal lines are required; if they cannot be read
the request fails. Inventory usage, labor cost and POS sales only refine
the report: when they cannot be read the report is still produced, the
amount is treated as zero and a data quality note says so.
"""

import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.accounting import AccountType
from app.schemas.accounting import AccountBalance, AccountSnapshot, JournalLineSnapshot
from app.schemas.financial_statements import (
    BalanceSheetReport,
    CashFlowStatementReport,
    IncomeStatementReport,
    RevenueBreakdown,
    TrialBalanceReport,
)
from app.services.ledger_repository import LedgerRepository
from app.services.statement_calculators import (
    AccrualGapFiller,
    BalanceCalculator,
    RevenueBreakdownCalculator,
    StatementComposer,
    ZERO,
)
from app.utils.error_handling import (
    DatabaseException,
    RestaurantNotFoundException,
    validate_date_range,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

INCOME_STATEMENT_TYPES = (AccountType.REVENUE, AccountType.COGS, AccountType.EXPENSE)


class FinancialStatementService:
    """Service for financial statement generation."""

    def __init__(self, db: AsyncSession, tolerance: Optional[Decimal] = None):
        self.db = db
        self.repository = LedgerRepository(db)
        self.tolerance = settings.balance_tolerance if tolerance is None else tolerance

    # =========================================================================
    # DATA LOADING
    # =========================================================================

    async def _load_accounts(
        self,
        restaurant_id: uuid.UUID,
        account_types: Optional[tuple] = None,
    ) -> List[AccountSnapshot]:
        try:
            return await self.repository.get_accounts(restaurant_id, account_types)
        except SQLAlchemyError as e:
            raise DatabaseException(
                message="Failed to load chart of accounts",
                original_error=e,
            ) from e

    async def _load_lines(
        self,
        restaurant_id: uuid.UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[JournalLineSnapshot]:
        try:
            return await self.repository.get_journal_lines(restaurant_id, date_from, date_to)
        except SQLAlchemyError as e:
            raise DatabaseException(
                message="Failed to load journal entries",
                original_error=e,
            ) from e

    async def _load_optional(
        self,
        label: str,
        fetch: Callable[[], Awaitable[T]],
        default: T,
        notes: List[str],
        note: str,
    ) -> T:
        """Run a secondary read; on failure log, record a note and use the default."""
        try:
            return await fetch()
        except SQLAlchemyError as e:
            logger.warning(f"Could not load {label}: {e}")
            notes.append(note)
            return default

    async def _fill_gaps(
        self,
        restaurant_id: uuid.UUID,
        balances: List[AccountBalance],
        date_from: Optional[date],
        date_to: date,
        gl_only: bool,
        notes: List[str],
    ) -> List[AccountBalance]:
        """Add unposted inventory usage and payroll unless GL-only."""
        if gl_only:
            return AccrualGapFiller.fill_accrual_gaps(balances, strict_mode=True)

        usage_total = await self._load_optional(
            "inventory usage",
            lambda: self.repository.get_inventory_usage_total(restaurant_id, date_from, date_to),
            ZERO,
            notes,
            "Inventory usage could not be loaded; no unposted inventory usage was included.",
        )
        hourly_total = await self._load_optional(
            "hourly labor cost",
            lambda: self.repository.get_hourly_labor_total(restaurant_id, date_from, date_to),
            ZERO,
            notes,
            "Hourly labor cost could not be loaded; unposted payroll excludes hourly wages.",
        )
        allocation_total = await self._load_optional(
            "salary and contractor allocations",
            lambda: self.repository.get_labor_allocation_total(restaurant_id, date_from, date_to),
            ZERO,
            notes,
            "Salary and contractor allocations could not be loaded; unposted payroll excludes them.",
        )

        return AccrualGapFiller.fill_accrual_gaps(
            balances,
            usage_cost=AccrualGapFiller.usage_cost_from_total(usage_total),
            payroll_cost=AccrualGapFiller.payroll_cost_from_totals(hourly_total, allocation_total),
            strict_mode=False,
        )

    async def _revenue_breakdown(
        self,
        restaurant_id: uuid.UUID,
        date_from: date,
        date_to: date,
        notes: List[str],
    ) -> Optional[RevenueBreakdown]:
        try:
            categories, uncategorized = await self.repository.get_revenue_by_account(
                restaurant_id, date_from, date_to
            )
            pass_through = await self.repository.get_pass_through_totals(
                restaurant_id, date_from, date_to
            )
        except SQLAlchemyError as e:
            logger.warning(f"Could not load POS revenue breakdown: {e}")
            notes.append("POS sales could not be loaded; revenue is taken from the general ledger.")
            return None

        return RevenueBreakdownCalculator.compose_revenue_breakdown(
            categories, uncategorized, pass_through
        )

    async def get_restaurant_name(self, restaurant_id: uuid.UUID) -> Optional[str]:
        """
        Display name for export headers.

        Returns None when the lookup fails; raises RestaurantNotFoundException
        when the restaurant does not exist.
        """
        try:
            name = await self.repository.get_restaurant_name(restaurant_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load restaurant name for {restaurant_id}: {e}")
            return None
        if name is None:
            raise RestaurantNotFoundException(restaurant_id)
        return name

    # =========================================================================
    # REPORTS
    # =========================================================================

    async def get_trial_balance(
        self,
        restaurant_id: uuid.UUID,
        as_of_date: date,
    ) -> TrialBalanceReport:
        """Generate trial balance report from journal lines up to as_of_date."""
        accounts = await self._load_accounts(restaurant_id)
        lines = await self._load_lines(restaurant_id, date_to=as_of_date)

        balances = BalanceCalculator.compute_balances(accounts, lines)
        return StatementComposer.compose_trial_balance(
            balances,
            tolerance=self.tolerance,
            restaurant_id=restaurant_id,
            as_of_date=as_of_date,
        )

    async def get_income_statement(
        self,
        restaurant_id: uuid.UUID,
        date_from: date,
        date_to: date,
        gl_only: bool = False,
    ) -> IncomeStatementReport:
        """
        Generate income statement (P&L) for a period.

        Unless gl_only, unposted inventory usage and payroll fill gaps in
        the GL and categorized POS sales provide the revenue line.
        """
        validate_date_range(date_from, date_to)
        notes: List[str] = []

        accounts = await self._load_accounts(restaurant_id, INCOME_STATEMENT_TYPES)
        lines = await self._load_lines(restaurant_id, date_from, date_to)
        balances = BalanceCalculator.compute_balances(accounts, lines)
        balances = await self._fill_gaps(restaurant_id, balances, date_from, date_to, gl_only, notes)

        revenue_breakdown = None
        if not gl_only:
            revenue_breakdown = await self._revenue_breakdown(restaurant_id, date_from, date_to, notes)

        report = StatementComposer.compose_income_statement(
            balances,
            revenue_breakdown=revenue_breakdown,
            restaurant_id=restaurant_id,
            start_date=date_from,
            end_date=date_to,
            gl_only=gl_only,
        )
        report.data_quality_notes = notes
        return report

    async def get_balance_sheet(
        self,
        restaurant_id: uuid.UUID,
        as_of_date: date,
        gl_only: bool = False,
    ) -> BalanceSheetReport:
        """
        Generate balance sheet as of a date.

        All account types are loaded so revenue and expense activity up to
        the as-of date can be rolled into equity as current period net income.
        """
        notes: List[str] = []

        accounts = await self._load_accounts(restaurant_id)
        lines = await self._load_lines(restaurant_id, date_to=as_of_date)
        balances = BalanceCalculator.compute_balances(accounts, lines)
        balances = await self._fill_gaps(restaurant_id, balances, None, as_of_date, gl_only, notes)

        report = StatementComposer.compose_balance_sheet(
            balances,
            tolerance=self.tolerance,
            restaurant_id=restaurant_id,
            as_of_date=as_of_date,
            gl_only=gl_only,
        )
        report.data_quality_notes = notes
        return report

    async def get_cash_flow_statement(
        self,
        restaurant_id: uuid.UUID,
        date_from: date,
        date_to: date,
    ) -> CashFlowStatementReport:
        """Generate cash flow statement for a period."""
        validate_date_range(date_from, date_to)

        accounts = await self._load_accounts(restaurant_id, (AccountType.ASSET,))
        period_lines = await self._load_lines(restaurant_id, date_from, date_to)
        opening_lines = await self._load_lines(restaurant_id, date_to=date_from - timedelta(days=1))

        return StatementComposer.compose_cash_flow(
            accounts,
            period_lines,
            opening_lines,
            restaurant_id=restaurant_id,
            start_date=date_from,
            end_date=date_to,
        )
