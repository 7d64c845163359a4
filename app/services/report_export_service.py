"""
Restaurant Ledger - Financial Report Export Service

Exports composed statements as CSV or PDF:
- Balance Sheet
- Income Statement (Profit & Loss)
- Trial Balance
- Cash Flow Statement

Each report is first flattened into rows (labelled PDF rows or
[code, name, amount] CSV rows) and then serialized.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Any, List, Optional, Sequence, Tuple, Union
from xml.sax.saxutils import escape

# PDF Generation (reportlab)
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, HRFlowable
)

from app.config import settings
from app.models.accounting import NormalBalance
from app.schemas.financial_statements import (
    BalanceSheetReport,
    CashFlowStatementReport,
    IncomeStatementReport,
    ReportRow,
    RevenueSource,
    StatementLineItem,
    TrialBalanceReport,
)
from app.utils.error_handling import UnsupportedExportFormatException
from app.utils.formatting import format_currency, quantize_money, slugify

AnyReport = Union[BalanceSheetReport, IncomeStatementReport, TrialBalanceReport, CashFlowStatementReport]

CsvRow = List[str]


class ReportFormat(str, PyEnum):
    """Export format options"""
    PDF = "pdf"
    CSV = "csv"


class ReportType(str, PyEnum):
    """Available report types"""
    BALANCE_SHEET = "balance-sheet"
    INCOME_STATEMENT = "income-statement"
    TRIAL_BALANCE = "trial-balance"
    CASH_FLOW = "cash-flow"


REPORT_TITLES = {
    ReportType.BALANCE_SHEET: "Balance Sheet",
    ReportType.INCOME_STATEMENT: "Income Statement",
    ReportType.TRIAL_BALANCE: "Trial Balance",
    ReportType.CASH_FLOW: "Cash Flow Statement",
}

CONTENT_TYPES = {
    ReportFormat.PDF: "application/pdf",
    ReportFormat.CSV: "text/csv",
}


# =============================================================================
# HELPERS
# =============================================================================

def generate_standard_filename(
    report_type: Union[ReportType, str],
    restaurant_name: Optional[str],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    as_of_date: Optional[date] = None,
) -> str:
    """
    Build an export filename without extension.

    >>> generate_standard_filename("balance-sheet", "Joe's Diner", as_of_date=date(2024, 1, 31))
    'balance-sheet_joes-diner_as-of_2024-01-31'
    """
    report = report_type.value if isinstance(report_type, ReportType) else str(report_type)
    parts = [slugify(report), slugify(restaurant_name or "") or "restaurant"]
    if as_of_date is not None:
        parts.append(f"as-of_{as_of_date.isoformat()}")
    elif date_from is not None and date_to is not None:
        parts.append(f"{date_from.isoformat()}_to_{date_to.isoformat()}")
    return "_".join(parts)


def csv_amount(amount: Optional[Decimal]) -> str:
    return str(quantize_money(amount))


def rows_to_csv(rows: List[List[Any]]) -> str:
    """Serialize rows with the csv module (quotes names containing commas)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def _account_label(item: StatementLineItem) -> str:
    if item.account_code:
        return f"{item.account_code} - {item.account_name}"
    return item.account_name


def _blank() -> ReportRow:
    return ReportRow(label="")


def report_notes(report: AnyReport) -> List[str]:
    """Warnings first, then data quality notes."""
    return list(getattr(report, "warnings", None) or []) + list(getattr(report, "data_quality_notes", None) or [])


class FinancialReportExportService:
    """Service for flattening and exporting financial reports."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles for reports."""
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=18,
            alignment=TA_CENTER,
            spaceAfter=6,
            textColor=colors.HexColor("#1a365d")
        ))
        self.styles.add(ParagraphStyle(
            name='ReportSubtitle',
            parent=self.styles['Heading2'],
            fontSize=12,
            alignment=TA_CENTER,
            spaceAfter=6,
            textColor=colors.HexColor("#4a5568")
        ))
        self.styles.add(ParagraphStyle(
            name='Note',
            parent=self.styles['Normal'],
            fontSize=8,
            leftIndent=12,
            textColor=colors.HexColor("#9b2c2c")
        ))
        self.styles.add(ParagraphStyle(
            name='Footer',
            parent=self.styles['Normal'],
            fontSize=8,
            alignment=TA_CENTER,
            textColor=colors.HexColor("#718096")
        ))

    # =========================================================================
    # BALANCE SHEET
    # =========================================================================

    def build_balance_sheet_pdf_rows(self, report: BalanceSheetReport) -> List[ReportRow]:
        rows = [ReportRow(label="ASSETS", is_bold=True, is_section_header=True)]
        rows.extend(
            ReportRow(label=_account_label(item), amount=item.amount, indent=1)
            for item in report.assets
        )
        rows.append(ReportRow(label="Total Assets", amount=report.total_assets, is_total=True))
        rows.append(_blank())

        rows.append(ReportRow(label="LIABILITIES", is_bold=True, is_section_header=True))
        rows.extend(
            ReportRow(label=_account_label(item), amount=item.amount, indent=1)
            for item in report.liabilities
        )
        rows.append(ReportRow(label="Total Liabilities", amount=report.total_liabilities, is_subtotal=True))
        rows.append(_blank())

        rows.append(ReportRow(label="EQUITY", is_bold=True, is_section_header=True))
        rows.extend(
            ReportRow(label=_account_label(item), amount=item.amount, indent=1)
            for item in report.equity
        )
        rows.append(ReportRow(label="Total Equity", amount=report.total_equity, is_subtotal=True))
        rows.append(_blank())
        rows.append(ReportRow(
            label="Total Liabilities & Equity",
            amount=report.total_liabilities_and_equity,
            is_total=True,
        ))
        return rows

    def build_balance_sheet_csv_rows(self, report: BalanceSheetReport) -> List[CsvRow]:
        rows: List[CsvRow] = [
            ["Balance Sheet"],
            [f"As of: {report.as_of_date.strftime('%b %d, %Y')}" if report.as_of_date else "As of:"],
            [""],
        ]
        for title, items, total_label, total in (
            ("ASSETS", report.assets, "Total Assets", report.total_assets),
            ("LIABILITIES", report.liabilities, "Total Liabilities", report.total_liabilities),
            ("EQUITY", report.equity, "Total Equity", report.total_equity),
        ):
            rows.append([title])
            rows.extend([item.account_code, item.account_name, csv_amount(item.amount)] for item in items)
            rows.append(["", total_label, csv_amount(total)])
            rows.append([""])
        rows.append(["", "Total Liabilities & Equity", csv_amount(report.total_liabilities_and_equity)])
        return rows

    # =========================================================================
    # INCOME STATEMENT
    # =========================================================================

    def _uses_pos_revenue(self, report: IncomeStatementReport) -> bool:
        return report.revenue_source == RevenueSource.POS and report.revenue_breakdown is not None

    def build_income_statement_pdf_rows(self, report: IncomeStatementReport) -> List[ReportRow]:
        rows = [ReportRow(label="Revenue", is_bold=True, is_section_header=True)]

        if self._uses_pos_revenue(report):
            breakdown = report.revenue_breakdown
            totals = breakdown.totals
            rows.extend(
                ReportRow(label=f"{cat.account_code} - {cat.account_name}", amount=cat.total_amount, indent=1)
                for cat in breakdown.revenue_categories
            )
            if totals.uncategorized_revenue > 0:
                rows.append(ReportRow(label="Uncategorized Sales", amount=totals.uncategorized_revenue, indent=1))
            rows.append(ReportRow(label="Gross Revenue", amount=totals.gross_revenue, is_subtotal=True))
            if totals.total_discounts > 0:
                rows.append(ReportRow(label="Less: Discounts & Comps", amount=-totals.total_discounts, indent=1))
            if totals.total_refunds > 0:
                rows.append(ReportRow(label="Less: Refunds & Returns", amount=-totals.total_refunds, indent=1))
            rows.append(ReportRow(label="Net Sales Revenue", amount=totals.net_revenue, is_total=True))

            if totals.sales_tax > 0 or totals.tips > 0:
                rows.append(_blank())
                rows.append(ReportRow(label="Other Collections (Pass-Through)", is_bold=True, is_section_header=True))
                if totals.sales_tax > 0:
                    rows.append(ReportRow(label="Sales Tax Collected (Liability)", amount=totals.sales_tax, indent=1))
                if totals.tips > 0:
                    rows.append(ReportRow(label="Tips Collected (Liability)", amount=totals.tips, indent=1))
        else:
            rows.extend(
                ReportRow(label=_account_label(item), amount=item.amount, indent=1)
                for item in report.revenue_items
            )
            rows.append(ReportRow(label="Total Revenue", amount=report.total_revenue, is_subtotal=True))

        rows.append(_blank())
        rows.append(ReportRow(label="Cost of Goods Sold", is_bold=True, is_section_header=True))
        rows.extend(
            ReportRow(label=_account_label(item), amount=item.amount, indent=1)
            for item in report.cogs_items
        )
        if report.inventory_usage_adjustment:
            rows.append(ReportRow(
                label="Inventory Usage (unposted)",
                amount=report.inventory_usage_adjustment,
                indent=1,
            ))
        rows.append(ReportRow(label="Total COGS", amount=report.total_cogs, is_subtotal=True))
        rows.append(_blank())
        rows.append(ReportRow(label="Gross Profit", amount=report.gross_profit, is_total=True))
        rows.append(_blank())

        rows.append(ReportRow(label="Operating Expenses", is_bold=True, is_section_header=True))
        rows.extend(
            ReportRow(label=_account_label(item), amount=item.amount, indent=1)
            for item in report.expense_items
        )
        rows.append(ReportRow(label="Total Expenses", amount=report.total_expenses, is_subtotal=True))
        rows.append(_blank())
        rows.append(ReportRow(label="Net Income", amount=report.net_income, is_total=True))
        return rows

    def build_income_statement_csv_rows(self, report: IncomeStatementReport) -> List[CsvRow]:
        period = ""
        if report.start_date and report.end_date:
            period = f"{report.start_date.strftime('%b %d, %Y')} - {report.end_date.strftime('%b %d, %Y')}"
        rows: List[CsvRow] = [
            ["Income Statement"],
            [f"Period: {period}"],
            [""],
            ["Revenue"],
        ]

        if self._uses_pos_revenue(report):
            breakdown = report.revenue_breakdown
            totals = breakdown.totals
            rows.extend(
                [cat.account_code, cat.account_name, csv_amount(cat.total_amount)]
                for cat in breakdown.revenue_categories
            )
            if totals.uncategorized_revenue > 0:
                rows.append(["", "Uncategorized Sales", csv_amount(totals.uncategorized_revenue)])
            rows.append(["", "Gross Revenue", csv_amount(totals.gross_revenue)])
            if totals.total_discounts > 0:
                rows.append(["", "Less: Discounts & Comps", csv_amount(-totals.total_discounts)])
            if totals.total_refunds > 0:
                rows.append(["", "Less: Refunds & Returns", csv_amount(-totals.total_refunds)])
            rows.append(["", "Net Sales Revenue", csv_amount(totals.net_revenue)])

            if totals.sales_tax > 0 or totals.tips > 0:
                rows.extend([[""], ["Other Collections (Pass-Through)"]])
                if totals.sales_tax > 0:
                    rows.append(["", "Sales Tax Collected (Liability)", csv_amount(totals.sales_tax)])
                if totals.tips > 0:
                    rows.append(["", "Tips Collected (Liability)", csv_amount(totals.tips)])
        else:
            rows.extend(
                [item.account_code, item.account_name, csv_amount(item.amount)]
                for item in report.revenue_items
            )
            rows.append(["", "Total Revenue", csv_amount(report.total_revenue)])

        rows.extend([[""], ["Cost of Goods Sold"]])
        rows.extend(
            [item.account_code, item.account_name, csv_amount(item.amount)]
            for item in report.cogs_items
        )
        if report.inventory_usage_adjustment:
            rows.append(["", "Inventory Usage (unposted)", csv_amount(report.inventory_usage_adjustment)])
        rows.append(["", "Total COGS", csv_amount(report.total_cogs)])
        rows.extend([[""], ["", "Gross Profit", csv_amount(report.gross_profit)], [""], ["Operating Expenses"]])
        rows.extend(
            [item.account_code, item.account_name, csv_amount(item.amount)]
            for item in report.expense_items
        )
        rows.append(["", "Total Expenses", csv_amount(report.total_expenses)])
        rows.extend([[""], ["", "Net Income", csv_amount(report.net_income)]])
        return rows

    # =========================================================================
    # TRIAL BALANCE
    # =========================================================================

    def build_trial_balance_pdf_rows(self, report: TrialBalanceReport) -> List[ReportRow]:
        rows = [ReportRow(label="ACCOUNTS (Debit / Credit)", is_bold=True, is_section_header=True)]
        for item in report.items:
            amount = item.debit_balance if item.normal_balance == NormalBalance.DEBIT else item.credit_balance
            side = "Dr" if item.normal_balance == NormalBalance.DEBIT else "Cr"
            rows.append(ReportRow(
                label=f"{item.account_code} - {item.account_name} ({side})",
                amount=amount,
                indent=1,
            ))
        rows.append(_blank())
        rows.append(ReportRow(label="Total Debits", amount=report.total_debits, is_subtotal=True))
        rows.append(ReportRow(label="Total Credits", amount=report.total_credits, is_subtotal=True))
        rows.append(ReportRow(label="Difference", amount=report.difference, is_total=True))
        return rows

    def build_trial_balance_csv_rows(self, report: TrialBalanceReport) -> List[CsvRow]:
        rows: List[CsvRow] = [
            ["Trial Balance"],
            [f"As of: {report.as_of_date.strftime('%b %d, %Y')}" if report.as_of_date else "As of:"],
            [""],
            ["Account Code", "Account Name", "Debit", "Credit"],
        ]
        rows.extend(
            [item.account_code, item.account_name, csv_amount(item.debit_balance), csv_amount(item.credit_balance)]
            for item in report.items
        )
        rows.append(["", "Total", csv_amount(report.total_debits), csv_amount(report.total_credits)])
        rows.append(["", "Difference", csv_amount(report.difference)])
        return rows

    # =========================================================================
    # CASH FLOW
    # =========================================================================

    def build_cash_flow_pdf_rows(self, report: CashFlowStatementReport) -> List[ReportRow]:
        rows = [ReportRow(label="Operating Activities", is_bold=True, is_section_header=True)]
        rows.extend(
            ReportRow(label=item.description, amount=item.amount, indent=1)
            for item in report.operating_items
        )
        rows.append(ReportRow(
            label="Net Cash from Operating Activities",
            amount=report.operating_activities_total,
            is_subtotal=True,
        ))
        rows.append(ReportRow(
            label="Net Cash from Investing Activities",
            amount=report.investing_activities_total,
            is_subtotal=True,
        ))
        rows.append(ReportRow(
            label="Net Cash from Financing Activities",
            amount=report.financing_activities_total,
            is_subtotal=True,
        ))
        rows.append(_blank())
        rows.append(ReportRow(label="Net Change in Cash", amount=report.net_change_in_cash, is_total=True))
        rows.append(ReportRow(label="Cash at Beginning of Period", amount=report.beginning_cash))
        rows.append(ReportRow(label="Cash at End of Period", amount=report.ending_cash, is_total=True))
        return rows

    def build_cash_flow_csv_rows(self, report: CashFlowStatementReport) -> List[CsvRow]:
        period = ""
        if report.start_date and report.end_date:
            period = f"{report.start_date.strftime('%b %d, %Y')} - {report.end_date.strftime('%b %d, %Y')}"
        rows: List[CsvRow] = [
            ["Cash Flow Statement"],
            [f"Period: {period}"],
            [""],
            ["Cash Accounts"],
            ["Account Code", "Account Name", "Beginning", "Net Change", "Ending"],
        ]
        rows.extend(
            [
                a.account_code, a.account_name, csv_amount(a.beginning_balance),
                csv_amount(a.net_change), csv_amount(a.ending_balance),
            ]
            for a in report.cash_accounts
        )
        rows.extend([
            [""],
            ["", "Operating Activities", csv_amount(report.operating_activities_total)],
            ["", "Investing Activities", csv_amount(report.investing_activities_total)],
            ["", "Financing Activities", csv_amount(report.financing_activities_total)],
            ["", "Net Change in Cash", csv_amount(report.net_change_in_cash)],
            ["", "Cash at Beginning of Period", csv_amount(report.beginning_cash)],
            ["", "Cash at End of Period", csv_amount(report.ending_cash)],
        ])
        return rows

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render_pdf(
        self,
        title: str,
        restaurant_name: str,
        subtitle: str,
        rows: List[ReportRow],
        notes: Sequence[str] = (),
    ) -> bytes:
        """Render report rows as a single-column PDF statement."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch,
            title=f"{title} - {restaurant_name}",
        )

        elements = [
            Paragraph(escape(restaurant_name), self.styles['ReportTitle']),
            Paragraph(escape(title), self.styles['ReportSubtitle']),
            Paragraph(escape(subtitle), self.styles['ReportSubtitle']),
            Spacer(1, 16),
        ]

        data = []
        style_commands = [
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TOPPADDING', (0, 0), (-1, -1), 3),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
        ]
        for index, row in enumerate(rows):
            label = ("    " * row.indent) + row.label
            amount = format_currency(row.amount) if row.amount is not None else ""
            data.append([label, amount])

            if row.is_bold or row.is_subtotal or row.is_total:
                style_commands.append(('FONTNAME', (0, index), (-1, index), 'Helvetica-Bold'))
            if row.is_subtotal:
                style_commands.append(('LINEABOVE', (1, index), (1, index), 0.5, colors.HexColor("#a0aec0")))
            if row.is_total:
                style_commands.extend([
                    ('LINEABOVE', (0, index), (-1, index), 1, colors.HexColor("#2d3748")),
                    ('BACKGROUND', (0, index), (-1, index), colors.HexColor("#edf2f7")),
                ])

        if data:
            table = Table(data, colWidths=[4.75*inch, 2*inch])
            table.setStyle(TableStyle(style_commands))
            elements.append(table)

        if notes:
            elements.append(Spacer(1, 12))
            elements.append(Paragraph("<b>Notes</b>", self.styles['Normal']))
            elements.extend(Paragraph(escape(note), self.styles['Note']) for note in notes)

        elements.append(Spacer(1, 24))
        elements.append(HRFlowable(width="100%", color=colors.gray))
        elements.append(Paragraph(
            f"Generated by {settings.app_name} on {datetime.now().strftime('%Y-%m-%d %H:%M')}",
            self.styles['Footer']
        ))

        doc.build(elements)
        return buffer.getvalue()

    # =========================================================================
    # MAIN EXPORT METHOD
    # =========================================================================

    def _subtitle(self, report: AnyReport) -> str:
        as_of_date = getattr(report, "as_of_date", None)
        if as_of_date is not None:
            return f"As of {as_of_date.strftime('%b %d, %Y')}"
        start_date = getattr(report, "start_date", None)
        end_date = getattr(report, "end_date", None)
        if start_date and end_date:
            return f"{start_date.strftime('%b %d, %Y')} - {end_date.strftime('%b %d, %Y')}"
        return ""

    def export(
        self,
        report_type: ReportType,
        report: AnyReport,
        format: ReportFormat,
        restaurant_name: Optional[str] = None,
    ) -> Tuple[bytes, str, str]:
        """
        Export a composed report.

        Returns:
            Tuple of (file content bytes, filename, content type)
        """
        try:
            format = ReportFormat(format)
        except ValueError:
            raise UnsupportedExportFormatException(str(format))

        builders = {
            ReportType.BALANCE_SHEET: (self.build_balance_sheet_pdf_rows, self.build_balance_sheet_csv_rows),
            ReportType.INCOME_STATEMENT: (self.build_income_statement_pdf_rows, self.build_income_statement_csv_rows),
            ReportType.TRIAL_BALANCE: (self.build_trial_balance_pdf_rows, self.build_trial_balance_csv_rows),
            ReportType.CASH_FLOW: (self.build_cash_flow_pdf_rows, self.build_cash_flow_csv_rows),
        }
        pdf_rows, csv_rows = builders[report_type]
        notes = report_notes(report)

        filename = generate_standard_filename(
            report_type,
            restaurant_name,
            date_from=getattr(report, "start_date", None),
            date_to=getattr(report, "end_date", None),
            as_of_date=getattr(report, "as_of_date", None),
        )

        if format == ReportFormat.PDF:
            content = self.render_pdf(
                REPORT_TITLES[report_type],
                restaurant_name or "Restaurant",
                self._subtitle(report),
                pdf_rows(report),
                notes=notes,
            )
        else:
            rows = csv_rows(report)
            if notes:
                rows.extend([[""], ["Notes"]])
                rows.extend(["", note] for note in notes)
            content = rows_to_csv(rows).encode("utf-8")

        return content, f"{filename}.{format.value}", CONTENT_TYPES[format]
