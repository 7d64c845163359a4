"""
Restaurant Ledger - Operational Data Models

Read-only mappings of the operational tables that feed unposted accruals
and POS revenue:
- Restaurants
- Inventory transactions (usage drives the inventory usage adjustment)
- Daily labor costs and salary/contractor allocations (payroll fallback)
- Unified POS sales (revenue breakdown)
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, Text, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, CreatedAtMixin, TimestampMixin


class InventoryTransactionType(str, Enum):
    """Inventory movement types."""
    PURCHASE = "purchase"
    USAGE = "usage"
    ADJUSTMENT = "adjustment"
    WASTE = "waste"
    TRANSFER = "transfer"


class CompensationType(str, Enum):
    """Employee compensation types."""
    HOURLY = "hourly"
    SALARY = "salary"
    CONTRACTOR = "contractor"


class PassThroughType(str, Enum):
    """POS adjustment lines that are collected but not earned."""
    TAX = "tax"
    TIP = "tip"
    SERVICE_CHARGE = "service_charge"
    DISCOUNT = "discount"
    FEE = "fee"


class Restaurant(BaseModel, TimestampMixin):
    """Restaurant (tenant) record."""

    __tablename__ = "restaurants"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Restaurant({self.name})>"


class InventoryTransaction(BaseModel, CreatedAtMixin):
    """Inventory movement; usage rows carry the consumed cost."""

    __tablename__ = "inventory_transactions"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(30), nullable=False)
    transaction_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=4), nullable=False)
    unit_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=18, scale=4), nullable=True)
    total_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=18, scale=2), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index('ix_inv_tx_restaurant_type_date', 'restaurant_id', 'transaction_type', 'transaction_date'),
    )


class DailyLaborCost(BaseModel, TimestampMixin):
    """Daily labor cost rollup (hourly wages from time punches)."""

    __tablename__ = "daily_labor_costs"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    labor_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    hourly_wages: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=2), default=Decimal("0.00"), nullable=False)
    salary_wages: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=2), default=Decimal("0.00"), nullable=False)
    benefits: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=2), default=Decimal("0.00"), nullable=False)
    total_labor_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=18, scale=2), nullable=True)
    total_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=2), nullable=True)
    source: Mapped[str] = mapped_column(String(50), default="time_punches", nullable=False)


class DailyLaborAllocation(BaseModel, TimestampMixin):
    """Per-day cost allocation for salaried employees and contractors."""

    __tablename__ = "daily_labor_allocations"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    labor_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    compensation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    allocated_cost: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=2), default=Decimal("0.00"), nullable=False)
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class UnifiedSale(BaseModel, CreatedAtMixin):
    """
    POS sale line imported from any POS system.

    Item lines have no adjustment_type; tax, tip, discount and fee
    lines carry one. Older imports mark pass-through and refund lines
    only through item_type (sale, tax, tip, discount, refund, ...).
    """

    __tablename__ = "unified_sales"

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pos_system: Mapped[str] = mapped_column(String(50), nullable=False)
    external_order_id: Mapped[str] = mapped_column(String(100), nullable=False)
    item_name: Mapped[str] = mapped_column(String(300), nullable=False)
    sale_date: Mapped[date] = mapped_column(Date, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=4), nullable=False)
    total_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=18, scale=2), nullable=True)
    item_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    adjustment_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chart_of_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_categorized: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    parent_sale_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    is_split: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    __table_args__ = (
        Index('ix_unified_sales_restaurant_date', 'restaurant_id', 'sale_date'),
    )
