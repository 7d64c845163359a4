"""
Restaurant Ledger - SQLAlchemy Models Package

This package contains the read-only mappings of the hosted store's tables.
"""

from app.models.base import BaseModel, CreatedAtMixin, TimestampMixin
from app.models.accounting import (
    AccountType,
    AccountSubType,
    NormalBalance,
    ChartOfAccounts,
    JournalEntry,
    JournalEntryLine,
)
from app.models.operations import (
    InventoryTransactionType,
    CompensationType,
    PassThroughType,
    Restaurant,
    InventoryTransaction,
    DailyLaborCost,
    DailyLaborAllocation,
    UnifiedSale,
)

__all__ = [
    "BaseModel",
    "CreatedAtMixin",
    "TimestampMixin",
    "AccountType",
    "AccountSubType",
    "NormalBalance",
    "ChartOfAccounts",
    "JournalEntry",
    "JournalEntryLine",
    "InventoryTransactionType",
    "CompensationType",
    "PassThroughType",
    "Restaurant",
    "InventoryTransaction",
    "DailyLaborCost",
    "DailyLaborAllocation",
    "UnifiedSale",
]
