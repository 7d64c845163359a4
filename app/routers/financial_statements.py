"""
Restaurant Ledger - Financial Statements Router

API endpoints for the four financial statements and their exports:
- Trial Balance
- Income Statement (Profit & Loss)
- Balance Sheet
- Cash Flow Statement
- CSV / PDF export of any of the above
"""

import io
import uuid
from datetime import date
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.schemas.financial_statements import (
    BalanceSheetReport,
    CashFlowStatementReport,
    IncomeStatementReport,
    TrialBalanceReport,
)
from app.services.financial_statement_service import FinancialStatementService
from app.services.report_export_service import (
    FinancialReportExportService,
    ReportFormat,
    ReportType,
)


router = APIRouter(
    prefix="/api/v1/restaurants/{restaurant_id}/financial-statements",
    tags=["Financial Statements"],
)


def resolve_period(date_from: Optional[date], date_to: Optional[date]) -> Tuple[date, date]:
    """Default to month-to-date when the window is not given."""
    date_to = date_to or date.today()
    date_from = date_from or date_to.replace(day=1)
    return date_from, date_to


def resolve_gl_only(gl_only: Optional[bool]) -> bool:
    return settings.default_gl_only if gl_only is None else gl_only


# =============================================================================
# REPORTS
# =============================================================================

@router.get(
    "/trial-balance",
    response_model=TrialBalanceReport,
    summary="Trial Balance",
)
async def get_trial_balance(
    restaurant_id: uuid.UUID = Path(..., description="Restaurant ID"),
    as_of_date: Optional[date] = Query(None, description="Report date (defaults to today)"),
    db: AsyncSession = Depends(get_db),
):
    """Debit and credit totals per account as of a date."""
    service = FinancialStatementService(db)
    return await service.get_trial_balance(restaurant_id, as_of_date or date.today())


@router.get(
    "/income-statement",
    response_model=IncomeStatementReport,
    summary="Income Statement",
)
async def get_income_statement(
    restaurant_id: uuid.UUID = Path(..., description="Restaurant ID"),
    date_from: Optional[date] = Query(None, description="Period start (defaults to first of month)"),
    date_to: Optional[date] = Query(None, description="Period end (defaults to today)"),
    gl_only: Optional[bool] = Query(None, description="Exclude unposted accruals and POS revenue"),
    db: AsyncSession = Depends(get_db),
):
    """Revenue, COGS, expenses and net income for a period."""
    date_from, date_to = resolve_period(date_from, date_to)
    service = FinancialStatementService(db)
    return await service.get_income_statement(
        restaurant_id, date_from, date_to, gl_only=resolve_gl_only(gl_only)
    )


@router.get(
    "/balance-sheet",
    response_model=BalanceSheetReport,
    summary="Balance Sheet",
)
async def get_balance_sheet(
    restaurant_id: uuid.UUID = Path(..., description="Restaurant ID"),
    as_of_date: Optional[date] = Query(None, description="Report date (defaults to today)"),
    gl_only: Optional[bool] = Query(None, description="Exclude unposted accruals"),
    db: AsyncSession = Depends(get_db),
):
    """Assets, liabilities and equity as of a date."""
    service = FinancialStatementService(db)
    return await service.get_balance_sheet(
        restaurant_id, as_of_date or date.today(), gl_only=resolve_gl_only(gl_only)
    )


@router.get(
    "/cash-flow",
    response_model=CashFlowStatementReport,
    summary="Cash Flow Statement",
)
async def get_cash_flow_statement(
    restaurant_id: uuid.UUID = Path(..., description="Restaurant ID"),
    date_from: Optional[date] = Query(None, description="Period start (defaults to first of month)"),
    date_to: Optional[date] = Query(None, description="Period end (defaults to today)"),
    db: AsyncSession = Depends(get_db),
):
    """Net change in cash and bank balances for a period."""
    date_from, date_to = resolve_period(date_from, date_to)
    service = FinancialStatementService(db)
    return await service.get_cash_flow_statement(restaurant_id, date_from, date_to)


# =============================================================================
# EXPORT
# =============================================================================

@router.get(
    "/{report_type}/export",
    summary="Export a financial statement",
    description="Download a statement as CSV or PDF",
)
async def export_financial_statement(
    report_type: ReportType,
    restaurant_id: uuid.UUID = Path(..., description="Restaurant ID"),
    format: ReportFormat = Query(ReportFormat.PDF, description="Export format"),
    as_of_date: Optional[date] = Query(None, description="Report date for trial balance and balance sheet"),
    date_from: Optional[date] = Query(None, description="Period start for income statement and cash flow"),
    date_to: Optional[date] = Query(None, description="Period end for income statement and cash flow"),
    gl_only: Optional[bool] = Query(None, description="Exclude unposted accruals"),
    db: AsyncSession = Depends(get_db),
):
    """Export a statement."""
    service = FinancialStatementService(db)
    restaurant_name = await service.get_restaurant_name(restaurant_id)
    gl_only = resolve_gl_only(gl_only)

    if report_type == ReportType.TRIAL_BALANCE:
        report = await service.get_trial_balance(restaurant_id, as_of_date or date.today())
    elif report_type == ReportType.BALANCE_SHEET:
        report = await service.get_balance_sheet(restaurant_id, as_of_date or date.today(), gl_only=gl_only)
    elif report_type == ReportType.INCOME_STATEMENT:
        date_from, date_to = resolve_period(date_from, date_to)
        report = await service.get_income_statement(restaurant_id, date_from, date_to, gl_only=gl_only)
    else:
        date_from, date_to = resolve_period(date_from, date_to)
        report = await service.get_cash_flow_statement(restaurant_id, date_from, date_to)

    content, filename, media_type = FinancialReportExportService().export(
        report_type, report, format, restaurant_name
    )

    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
