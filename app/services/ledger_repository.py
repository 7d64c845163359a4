"""
Restaurant Ledger - Ledger Repository

Read-only queries against the hosted store. Every query is scoped to one
restaurant; date filters are inclusive on both ends.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, func, and_, or_, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.models.accounting import AccountType, ChartOfAccounts, JournalEntry, JournalEntryLine
from app.models.operations import (
    CompensationType,
    DailyLaborAllocation,
    DailyLaborCost,
    InventoryTransaction,
    InventoryTransactionType,
    PassThroughType,
    Restaurant,
    UnifiedSale,
)
from app.schemas.accounting import AccountSnapshot, JournalLineSnapshot
from app.schemas.financial_statements import PassThroughTotal, RevenueCategory

logger = logging.getLogger(__name__)


def _date_window(column, date_from: Optional[date], date_to: Optional[date]) -> list:
    conditions = []
    if date_from is not None:
        conditions.append(column >= date_from)
    if date_to is not None:
        conditions.append(column <= date_to)
    return conditions


SALE_ITEM_TYPE = "sale"
PASS_THROUGH_ITEM_TYPES = tuple(t.value for t in PassThroughType)


def _item_kind():
    # Missing item_type means an ordinary sale
    return func.coalesce(func.lower(UnifiedSale.item_type), SALE_ITEM_TYPE)


def _uncategorized():
    return or_(
        UnifiedSale.is_categorized.is_not(True),
        UnifiedSale.category_id.is_(None),
    )


def _item_line_conditions(restaurant_id: uuid.UUID, date_from: date, date_to: date) -> list:
    """POS item lines (no adjustment_type) in the window, minus split parents."""
    child = aliased(UnifiedSale)
    return [
        UnifiedSale.restaurant_id == restaurant_id,
        UnifiedSale.sale_date >= date_from,
        UnifiedSale.sale_date <= date_to,
        UnifiedSale.adjustment_type.is_(None),
        ~exists().where(child.parent_sale_id == UnifiedSale.id),
    ]


class LedgerRepository:
    """Queries for chart of accounts, journal lines and operational aggregates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # RESTAURANT
    # =========================================================================

    async def get_restaurant_name(self, restaurant_id: uuid.UUID) -> Optional[str]:
        """Get restaurant display name, or None if it does not exist."""
        result = await self.db.execute(
            select(Restaurant.name).where(Restaurant.id == restaurant_id)
        )
        return result.scalar_one_or_none()

    # =========================================================================
    # GENERAL LEDGER
    # =========================================================================

    async def get_accounts(
        self,
        restaurant_id: uuid.UUID,
        account_types: Optional[Iterable[AccountType]] = None,
    ) -> List[AccountSnapshot]:
        """Get active accounts for a restaurant, ordered by account code."""
        query = select(ChartOfAccounts).where(
            and_(
                ChartOfAccounts.restaurant_id == restaurant_id,
                ChartOfAccounts.is_active == True,
            )
        )

        if account_types:
            query = query.where(
                ChartOfAccounts.account_type.in_([t.value for t in account_types])
            )

        query = query.order_by(ChartOfAccounts.account_code)

        result = await self.db.execute(query)
        return [AccountSnapshot.model_validate(row) for row in result.scalars().all()]

    async def get_journal_lines(
        self,
        restaurant_id: uuid.UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[JournalLineSnapshot]:
        """
        Get journal lines whose entry date falls in the window.

        With only date_to this is every line up to an as-of date.
        """
        query = (
            select(
                JournalEntryLine.account_id,
                JournalEntryLine.debit_amount,
                JournalEntryLine.credit_amount,
                JournalEntry.entry_date,
            )
            .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
            .where(JournalEntry.restaurant_id == restaurant_id)
        )

        window = _date_window(JournalEntry.entry_date, date_from, date_to)
        if window:
            query = query.where(and_(*window))

        result = await self.db.execute(query)
        lines = [
            JournalLineSnapshot(
                account_id=row.account_id,
                debit_amount=row.debit_amount,
                credit_amount=row.credit_amount,
                entry_date=row.entry_date,
            )
            for row in result.all()
        ]
        logger.debug(f"Loaded {len(lines)} journal lines for restaurant {restaurant_id}")
        return lines

    # =========================================================================
    # OPERATIONAL AGGREGATES
    # =========================================================================

    async def get_inventory_usage_total(
        self,
        restaurant_id: uuid.UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Decimal:
        """Sum of inventory usage cost (stored as outflows, so usually negative)."""
        conditions = [
            InventoryTransaction.restaurant_id == restaurant_id,
            InventoryTransaction.transaction_type == InventoryTransactionType.USAGE.value,
        ]
        conditions.extend(_date_window(InventoryTransaction.transaction_date, date_from, date_to))

        result = await self.db.execute(
            select(func.coalesce(func.sum(InventoryTransaction.total_cost), 0)).where(and_(*conditions))
        )
        return Decimal(str(result.scalar() or 0))

    async def get_hourly_labor_total(
        self,
        restaurant_id: uuid.UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Decimal:
        """Hourly wages from daily labor cost rollups."""
        conditions = [DailyLaborCost.restaurant_id == restaurant_id]
        conditions.extend(_date_window(DailyLaborCost.labor_date, date_from, date_to))

        result = await self.db.execute(
            select(func.coalesce(func.sum(DailyLaborCost.hourly_wages), 0)).where(and_(*conditions))
        )
        return Decimal(str(result.scalar() or 0))

    async def get_labor_allocation_total(
        self,
        restaurant_id: uuid.UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Decimal:
        """Salary and contractor cost allocated per day."""
        conditions = [
            DailyLaborAllocation.restaurant_id == restaurant_id,
            DailyLaborAllocation.compensation_type.in_([
                CompensationType.SALARY.value,
                CompensationType.CONTRACTOR.value,
            ]),
        ]
        conditions.extend(_date_window(DailyLaborAllocation.labor_date, date_from, date_to))

        result = await self.db.execute(
            select(func.coalesce(func.sum(DailyLaborAllocation.allocated_cost), 0)).where(and_(*conditions))
        )
        return Decimal(str(result.scalar() or 0))

    # =========================================================================
    # POS SALES
    # =========================================================================

    async def get_revenue_by_account(
        self,
        restaurant_id: uuid.UUID,
        date_from: date,
        date_to: date,
    ) -> Tuple[List[RevenueCategory], Decimal]:
        """
        Sum POS item sales per assigned account.

        Adjustment lines (tax, tip, ...) are excluded, as are sales that
        were split into child sales (the children are counted instead).
        Uncategorized lines only count when their item_type is a sale, so
        refunds, voids and item-typed tax or discount lines stay out of
        revenue.

        Returns:
            (categorized rows per account, uncategorized sales total)
        """
        item_sale_conditions = _item_line_conditions(restaurant_id, date_from, date_to)

        categorized = await self.db.execute(
            select(
                ChartOfAccounts.id,
                ChartOfAccounts.account_code,
                ChartOfAccounts.account_name,
                ChartOfAccounts.account_type,
                ChartOfAccounts.account_subtype,
                func.coalesce(func.sum(UnifiedSale.total_price), 0).label("total_amount"),
                func.count(UnifiedSale.id).label("transaction_count"),
            )
            .join(ChartOfAccounts, UnifiedSale.category_id == ChartOfAccounts.id)
            .where(and_(*item_sale_conditions, UnifiedSale.is_categorized == True))
            .group_by(
                ChartOfAccounts.id,
                ChartOfAccounts.account_code,
                ChartOfAccounts.account_name,
                ChartOfAccounts.account_type,
                ChartOfAccounts.account_subtype,
            )
            .order_by(ChartOfAccounts.account_code)
        )
        categories = [
            RevenueCategory(
                account_id=row.id,
                account_code=row.account_code or "",
                account_name=row.account_name or "",
                account_type=row.account_type,
                account_subtype=row.account_subtype,
                total_amount=Decimal(str(row.total_amount)),
                transaction_count=row.transaction_count,
            )
            for row in categorized.all()
        ]

        uncategorized = await self.db.execute(
            select(func.coalesce(func.sum(UnifiedSale.total_price), 0)).where(
                and_(
                    *item_sale_conditions,
                    _uncategorized(),
                    _item_kind() == SALE_ITEM_TYPE,
                )
            )
        )
        return categories, Decimal(str(uncategorized.scalar() or 0))

    async def get_pass_through_totals(
        self,
        restaurant_id: uuid.UUID,
        date_from: date,
        date_to: date,
    ) -> List[PassThroughTotal]:
        """
        Sum POS pass-through lines by adjustment type.

        Covers adjustment lines plus uncategorized item lines whose
        item_type names a pass-through kind (tax, tip, ...).
        """
        kind = func.coalesce(UnifiedSale.adjustment_type, _item_kind()).label("adjustment_type")
        item_typed = and_(
            *_item_line_conditions(restaurant_id, date_from, date_to),
            _uncategorized(),
            _item_kind().in_(PASS_THROUGH_ITEM_TYPES),
        )
        result = await self.db.execute(
            select(
                kind,
                func.coalesce(func.sum(UnifiedSale.total_price), 0).label("total_amount"),
                func.count(UnifiedSale.id).label("transaction_count"),
            )
            .where(
                or_(
                    and_(
                        UnifiedSale.restaurant_id == restaurant_id,
                        UnifiedSale.sale_date >= date_from,
                        UnifiedSale.sale_date <= date_to,
                        UnifiedSale.adjustment_type.is_not(None),
                    ),
                    item_typed,
                )
            )
            .group_by(kind)
        )
        return [
            PassThroughTotal(
                adjustment_type=row.adjustment_type,
                total_amount=Decimal(str(row.total_amount)),
                transaction_count=row.transaction_count,
            )
            for row in result.all()
        ]
