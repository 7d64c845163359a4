"""
Ledger Repository Tests

The AsyncSession is mocked; tests check row conversion and the shape of
the generated SQL.
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.models.accounting import AccountType, NormalBalance
from app.services.ledger_repository import LedgerRepository


def _result(rows=None, scalar=None, scalars=None):
    result = MagicMock()
    result.all.return_value = rows or []
    result.scalar.return_value = scalar
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = scalars or []
    return result


@pytest.fixture
def db():
    session = MagicMock()
    session.execute = AsyncMock()
    return session


def _sql(db, call_index=0):
    return str(db.execute.await_args_list[call_index].args[0])


class TestGeneralLedgerQueries:
    """Chart of accounts and journal lines."""

    @pytest.mark.asyncio
    async def test_get_accounts(self, db, restaurant_id):
        row = SimpleNamespace(
            id=uuid4(),
            account_code="1000",
            account_name="Cash on Hand",
            account_type="asset",
            account_subtype="cash",
            normal_balance="debit",
            is_active=True,
        )
        db.execute.return_value = _result(scalars=[row])

        accounts = await LedgerRepository(db).get_accounts(restaurant_id)

        assert len(accounts) == 1
        assert accounts[0].account_type == AccountType.ASSET
        assert accounts[0].normal_balance == NormalBalance.DEBIT
        sql = _sql(db)
        assert "chart_of_accounts.is_active" in sql
        assert "ORDER BY chart_of_accounts.account_code" in sql

    @pytest.mark.asyncio
    async def test_get_accounts_by_type(self, db, restaurant_id):
        db.execute.return_value = _result(scalars=[])

        await LedgerRepository(db).get_accounts(restaurant_id, (AccountType.REVENUE, AccountType.COGS))

        assert "chart_of_accounts.account_type IN" in _sql(db)

    @pytest.mark.asyncio
    async def test_get_journal_lines(self, db, restaurant_id):
        account_id = uuid4()
        db.execute.return_value = _result(rows=[
            SimpleNamespace(
                account_id=account_id,
                debit_amount=Decimal("12.50"),
                credit_amount=None,
                entry_date=date(2024, 1, 5),
            ),
        ])

        lines = await LedgerRepository(db).get_journal_lines(restaurant_id, date(2024, 1, 1), date(2024, 1, 31))

        assert lines[0].account_id == account_id
        assert lines[0].debit_amount == Decimal("12.50")
        assert lines[0].credit_amount is None
        sql = _sql(db)
        assert "JOIN journal_entries" in sql
        assert "journal_entries.entry_date >=" in sql
        assert "journal_entries.entry_date <=" in sql

    @pytest.mark.asyncio
    async def test_as_of_window(self, db, restaurant_id):
        db.execute.return_value = _result(rows=[])

        await LedgerRepository(db).get_journal_lines(restaurant_id, date_to=date(2024, 1, 31))

        sql = _sql(db)
        assert "journal_entries.entry_date <=" in sql
        assert "journal_entries.entry_date >=" not in sql


class TestOperationalQueries:
    """Inventory usage and labor aggregates."""

    @pytest.mark.asyncio
    async def test_inventory_usage_total(self, db, restaurant_id):
        db.execute.return_value = _result(scalar=Decimal("-275.40"))

        total = await LedgerRepository(db).get_inventory_usage_total(restaurant_id, date(2024, 1, 1), date(2024, 1, 31))

        assert total == Decimal("-275.40")
        assert "inventory_transactions.transaction_type" in _sql(db)

    @pytest.mark.asyncio
    async def test_empty_total_is_zero(self, db, restaurant_id):
        db.execute.return_value = _result(scalar=None)

        total = await LedgerRepository(db).get_hourly_labor_total(restaurant_id)

        assert total == Decimal("0")

    @pytest.mark.asyncio
    async def test_labor_allocations_exclude_hourly(self, db, restaurant_id):
        db.execute.return_value = _result(scalar=Decimal("800.00"))

        total = await LedgerRepository(db).get_labor_allocation_total(restaurant_id, None, date(2024, 1, 31))

        assert total == Decimal("800.00")
        sql = _sql(db)
        assert "daily_labor_allocations.compensation_type IN" in sql


class TestPosQueries:
    """POS sales aggregates."""

    @pytest.mark.asyncio
    async def test_revenue_by_account(self, db, restaurant_id):
        account_id = uuid4()
        db.execute.side_effect = [
            _result(rows=[
                SimpleNamespace(
                    id=account_id,
                    account_code="4000",
                    account_name="Food Sales",
                    account_type="revenue",
                    account_subtype="food_sales",
                    total_amount=Decimal("1500.00"),
                    transaction_count=37,
                ),
            ]),
            _result(scalar=Decimal("120.00")),
        ]

        categories, uncategorized = await LedgerRepository(db).get_revenue_by_account(
            restaurant_id, date(2024, 1, 1), date(2024, 1, 31)
        )

        assert categories[0].account_id == account_id
        assert categories[0].total_amount == Decimal("1500.00")
        assert categories[0].transaction_count == 37
        assert uncategorized == Decimal("120.00")
        sql = _sql(db)
        assert "unified_sales.adjustment_type IS NULL" in sql
        assert "EXISTS" in sql

    @pytest.mark.asyncio
    async def test_pass_through_totals(self, db, restaurant_id):
        db.execute.return_value = _result(rows=[
            SimpleNamespace(adjustment_type="tax", total_amount=Decimal("88.00"), transaction_count=11),
        ])

        totals = await LedgerRepository(db).get_pass_through_totals(
            restaurant_id, date(2024, 1, 1), date(2024, 1, 31)
        )

        assert totals[0].adjustment_type == "tax"
        assert totals[0].total_amount == Decimal("88.00")
        sql = _sql(db)
        assert "GROUP BY" in sql
        assert "coalesce(unified_sales.adjustment_type" in sql

    @pytest.mark.asyncio
    async def test_pass_through_totals_include_item_typed_lines(self, db, restaurant_id):
        db.execute.return_value = _result(rows=[
            SimpleNamespace(adjustment_type="tip", total_amount=Decimal("40.00"), transaction_count=4),
        ])

        await LedgerRepository(db).get_pass_through_totals(restaurant_id, date(2024, 1, 1), date(2024, 1, 31))

        sql = _sql(db)
        assert "lower(unified_sales.item_type)" in sql
        assert "unified_sales.adjustment_type IS NOT NULL" in sql
        assert "unified_sales.adjustment_type IS NULL" in sql

    @pytest.mark.asyncio
    async def test_uncategorized_revenue_counts_sale_lines_only(self, db, restaurant_id):
        db.execute.side_effect = [_result(rows=[]), _result(scalar=Decimal("75.00"))]

        categories, uncategorized = await LedgerRepository(db).get_revenue_by_account(
            restaurant_id, date(2024, 1, 1), date(2024, 1, 31)
        )

        assert categories == []
        assert uncategorized == Decimal("75.00")
        uncategorized_sql = _sql(db, call_index=1)
        assert "lower(unified_sales.item_type)" in uncategorized_sql
        assert "unified_sales.adjustment_type IS NULL" in uncategorized_sql

    @pytest.mark.asyncio
    async def test_restaurant_name(self, db, restaurant_id):
        db.execute.return_value = _result(scalar="Joe's Diner")

        assert await LedgerRepository(db).get_restaurant_name(restaurant_id) == "Joe's Diner"
