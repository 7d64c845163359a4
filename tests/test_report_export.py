"""
Report Export Tests - CSV / PDF rendering, filenames and currency formatting
"""

import csv
import io
from datetime import date
from decimal import Decimal

import pytest

from app.services.report_export_service import (
    FinancialReportExportService,
    ReportFormat,
    ReportType,
    generate_standard_filename,
    report_notes,
    rows_to_csv,
)
from app.services.statement_calculators import StatementComposer, compute_balances, fill_accrual_gaps
from app.utils.error_handling import UnsupportedExportFormatException
from app.utils.formatting import format_currency, quantize_money, slugify


@pytest.fixture
def export_service():
    return FinancialReportExportService()


@pytest.fixture
def balance_sheet(simple_period):
    accounts, lines = simple_period
    return StatementComposer.compose_balance_sheet(
        compute_balances(accounts, lines), as_of_date=date(2024, 1, 31)
    )


@pytest.fixture
def income_statement(simple_period):
    accounts, lines = simple_period
    return StatementComposer.compose_income_statement(
        compute_balances(accounts, lines),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )


class TestFormatting:
    """Currency and label formatting."""

    def test_format_currency(self):
        assert format_currency(Decimal("1200")) == "$1,200.00"
        assert format_currency(Decimal("-100")) == "($100.00)"
        assert format_currency(Decimal("0")) == "$0.00"
        assert format_currency(None) == "$0.00"

    def test_custom_symbol(self):
        assert format_currency(Decimal("5.5"), symbol="€") == "€5.50"

    def test_quantize_half_up(self):
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")

    def test_slugify(self):
        assert slugify("Joe's Diner") == "joes-diner"
        assert slugify("  The Taco  Stand!! ") == "the-taco-stand"


class TestFilenames:
    """Standard export filenames."""

    def test_as_of(self):
        filename = generate_standard_filename(
            ReportType.BALANCE_SHEET, "Joe's Diner", as_of_date=date(2024, 1, 31)
        )
        assert filename == "balance-sheet_joes-diner_as-of_2024-01-31"

    def test_period(self):
        filename = generate_standard_filename(
            "income-statement", "Joe's Diner", date_from=date(2024, 1, 1), date_to=date(2024, 1, 31)
        )
        assert filename == "income-statement_joes-diner_2024-01-01_to_2024-01-31"

    def test_missing_name(self):
        filename = generate_standard_filename(ReportType.TRIAL_BALANCE, None, as_of_date=date(2024, 3, 1))
        assert filename == "trial-balance_restaurant_as-of_2024-03-01"


class TestCsvExport:
    """CSV rows and serialization."""

    def test_balance_sheet_rows(self, export_service, balance_sheet):
        rows = export_service.build_balance_sheet_csv_rows(balance_sheet)

        assert rows[0] == ["Balance Sheet"]
        assert rows[1] == ["As of: Jan 31, 2024"]
        assert ["1000", "Cash on Hand", "700.00"] in rows
        assert ["", "Total Assets", "700.00"] in rows
        assert ["", "Current Period Net Income", "700.00"] in rows
        assert rows[-1] == ["", "Total Liabilities & Equity", "700.00"]

    def test_income_statement_rows(self, export_service, income_statement):
        rows = export_service.build_income_statement_csv_rows(income_statement)

        assert rows[0] == ["Income Statement"]
        assert rows[1] == ["Period: Jan 01, 2024 - Jan 31, 2024"]
        assert ["4000", "Food Sales", "1000.00"] in rows
        assert ["", "Total Revenue", "1000.00"] in rows
        assert ["", "Total Expenses", "300.00"] in rows
        assert rows[-1] == ["", "Net Income", "700.00"]

    def test_income_statement_inventory_usage_row(self, export_service, chart):
        balances = fill_accrual_gaps(
            compute_balances([chart["food_cost"]], []), usage_cost=Decimal("75.00")
        )
        report = StatementComposer.compose_income_statement(balances)
        rows = export_service.build_income_statement_csv_rows(report)

        assert ["", "Inventory Usage (unposted)", "75.00"] in rows
        assert ["", "Total COGS", "75.00"] in rows

    def test_trial_balance_rows(self, export_service, simple_period):
        accounts, lines = simple_period
        report = StatementComposer.compose_trial_balance(compute_balances(accounts, lines))
        rows = export_service.build_trial_balance_csv_rows(report)

        assert rows[3] == ["Account Code", "Account Name", "Debit", "Credit"]
        assert ["4000", "Food Sales", "0.00", "1000.00"] in rows
        assert ["", "Total", "1000.00", "1000.00"] in rows

    def test_names_with_commas_are_quoted(self):
        content = rows_to_csv([["6200", "Repairs, Maintenance", "12.00"]])
        assert content == '6200,"Repairs, Maintenance",12.00\n'

    def test_export_csv(self, export_service, balance_sheet):
        content, filename, media_type = export_service.export(
            ReportType.BALANCE_SHEET, balance_sheet, ReportFormat.CSV, "Joe's Diner"
        )

        assert filename == "balance-sheet_joes-diner_as-of_2024-01-31.csv"
        assert media_type == "text/csv"
        parsed = list(csv.reader(io.StringIO(content.decode("utf-8"))))
        assert parsed[0] == ["Balance Sheet"]
        assert ["Notes"] not in parsed

    def test_export_csv_lists_warnings_and_notes(self, export_service, balance_sheet):
        report = balance_sheet.model_copy(update={
            "is_balanced": False,
            "warnings": ["Balance sheet is out of balance by $12.50"],
            "data_quality_notes": ["Payroll accrual unavailable; labor costs may be understated"],
        })
        content, _, _ = export_service.export(ReportType.BALANCE_SHEET, report, ReportFormat.CSV)

        parsed = list(csv.reader(io.StringIO(content.decode("utf-8"))))
        assert parsed[-3:] == [
            ["Notes"],
            ["", "Balance sheet is out of balance by $12.50"],
            ["", "Payroll accrual unavailable; labor costs may be understated"],
        ]

    def test_report_notes_order(self, income_statement):
        report = income_statement.model_copy(update={
            "warnings": ["w"],
            "data_quality_notes": ["n1", "n2"],
        })
        assert report_notes(report) == ["w", "n1", "n2"]
        assert report_notes(income_statement) == []


class TestPdfExport:
    """PDF rows and rendering."""

    def test_balance_sheet_pdf_rows(self, export_service, balance_sheet):
        rows = export_service.build_balance_sheet_pdf_rows(balance_sheet)

        assert rows[0].label == "ASSETS"
        assert rows[0].is_section_header is True
        assert rows[1].label == "1000 - Cash on Hand"
        assert rows[1].indent == 1
        assert rows[-1].label == "Total Liabilities & Equity"
        assert rows[-1].is_total is True

    def test_trial_balance_pdf_rows(self, export_service, simple_period):
        accounts, lines = simple_period
        report = StatementComposer.compose_trial_balance(compute_balances(accounts, lines))
        rows = export_service.build_trial_balance_pdf_rows(report)

        labels = [row.label for row in rows]
        assert "1000 - Cash on Hand (Dr)" in labels
        assert "4000 - Food Sales (Cr)" in labels

    def test_cash_flow_pdf_rows(self, export_service, chart, make_line):
        report = StatementComposer.compose_cash_flow([chart["cash"]], [make_line(chart["cash"], debit="10.00")])
        rows = export_service.build_cash_flow_pdf_rows(report)

        assert rows[-1].label == "Cash at End of Period"
        assert rows[-1].amount == Decimal("10.00")

    def test_export_pdf(self, export_service, income_statement):
        content, filename, media_type = export_service.export(
            ReportType.INCOME_STATEMENT, income_statement, ReportFormat.PDF, "Joe's Diner & Grill"
        )

        assert content.startswith(b"%PDF")
        assert filename == "income-statement_joes-diner-grill_2024-01-01_to_2024-01-31.pdf"
        assert media_type == "application/pdf"

    def test_export_pdf_with_notes(self, export_service, balance_sheet):
        report = balance_sheet.model_copy(update={
            "warnings": ["Balance sheet is out of balance by $1.00 <check>"],
        })
        content, _, _ = export_service.export(ReportType.BALANCE_SHEET, report, ReportFormat.PDF)

        assert content.startswith(b"%PDF")

    def test_export_pdf_without_name(self, export_service, balance_sheet):
        content, filename, _ = export_service.export(
            ReportType.BALANCE_SHEET, balance_sheet, ReportFormat.PDF
        )

        assert content.startswith(b"%PDF")
        assert filename.startswith("balance-sheet_restaurant_")

    def test_unsupported_format(self, export_service, balance_sheet):
        with pytest.raises(UnsupportedExportFormatException):
            export_service.export(ReportType.BALANCE_SHEET, balance_sheet, "xlsx")
