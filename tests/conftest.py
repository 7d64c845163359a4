"""
Restaurant Ledger - Test Configuration

Pytest fixtures and configuration.
"""

from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.database import get_db
from app.models.accounting import AccountType
from app.schemas.accounting import AccountSnapshot, JournalLineSnapshot
from main import app


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client whose database dependency yields a mock session.

    API tests patch FinancialStatementService, so the session is never used.
    """

    async def override_get_db():
        yield MagicMock()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# LEDGER FIXTURES
# ===========================================

@pytest.fixture
def restaurant_id():
    return uuid4()


@pytest.fixture
def make_account():
    """Factory for chart of accounts snapshots."""

    def _make(code, name, account_type, subtype=None):
        return AccountSnapshot(
            id=uuid4(),
            account_code=code,
            account_name=name,
            account_type=account_type,
            account_subtype=subtype,
        )

    return _make


@pytest.fixture
def make_line():
    """Factory for journal line snapshots."""

    def _make(account, debit=None, credit=None, entry_date=None):
        return JournalLineSnapshot(
            account_id=account.id,
            debit_amount=Decimal(str(debit)) if debit is not None else None,
            credit_amount=Decimal(str(credit)) if credit is not None else None,
            entry_date=entry_date,
        )

    return _make


@pytest.fixture
def chart(make_account):
    """A small restaurant chart of accounts keyed by short name."""
    return {
        "cash": make_account("1000", "Cash on Hand", AccountType.ASSET, "cash"),
        "bank": make_account("1010", "Operating Checking", AccountType.ASSET, "bank"),
        "inventory": make_account("1200", "Food Inventory", AccountType.ASSET, "inventory"),
        "payroll_liability": make_account("2200", "Accrued Wages", AccountType.LIABILITY, "payroll_liabilities"),
        "owner_equity": make_account("3000", "Owner's Equity", AccountType.EQUITY, "owners_equity"),
        "sales": make_account("4000", "Food Sales", AccountType.REVENUE, "food_sales"),
        "food_cost": make_account("5000", "Food Cost", AccountType.COGS, "food_cost"),
        "wages": make_account("6000", "Wages & Salaries", AccountType.EXPENSE, "payroll"),
        "rent": make_account("6100", "Rent", AccountType.EXPENSE, "rent"),
    }


@pytest.fixture
def simple_period(chart, make_line):
    """
    Cash sales of 1000 and rent of 300 paid in cash.

    Leaves cash at 700, revenue at 1000 and rent expense at 300.
    """
    accounts = [chart["cash"], chart["owner_equity"], chart["sales"], chart["rent"]]
    lines = [
        make_line(chart["cash"], debit="1000.00"),
        make_line(chart["sales"], credit="1000.00"),
        make_line(chart["rent"], debit="300.00"),
        make_line(chart["cash"], credit="300.00"),
    ]
    return accounts, lines
