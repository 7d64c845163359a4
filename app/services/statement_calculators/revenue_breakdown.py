"""
Restaurant Ledger - POS Revenue Breakdown

Splits categorized POS sales into earned revenue, contra-revenue
(discounts, refunds) and pass-through collections (sales tax, tips,
service charges, fees) that are liabilities rather than income.

All arithmetic runs in integer cents.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from app.models.accounting import AccountType
from app.models.operations import PassThroughType
from app.schemas.financial_statements import (
    PassThroughTotal,
    RevenueBreakdown,
    RevenueBreakdownTotals,
    RevenueCategory,
)
from app.services.statement_calculators.classification import AccountClassifier


SALES_TAX_DISPLAY = {"code": "2100", "name": "Sales Tax Payable", "subtype": "sales_tax"}
TIPS_DISPLAY = {"code": "2150", "name": "Tips Payable", "subtype": "tips"}

# Order of the adjustments list on the breakdown
ADJUSTMENT_ORDER = (
    PassThroughType.TAX,
    PassThroughType.TIP,
    PassThroughType.SERVICE_CHARGE,
    PassThroughType.FEE,
    PassThroughType.DISCOUNT,
)


def to_cents(amount: Optional[Decimal]) -> int:
    return int((Decimal(str(amount or 0)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


class RevenueBreakdownCalculator:
    """POS revenue breakdown."""

    @staticmethod
    def _synthetic_category(
        adjustment_type: PassThroughType,
        cents: int,
        transaction_count: int,
        display: Dict[str, str],
    ) -> RevenueCategory:
        return RevenueCategory(
            account_id=f"synthetic-{adjustment_type.value}",
            account_code=display["code"],
            account_name=display["name"],
            account_type=AccountType.LIABILITY,
            account_subtype=display["subtype"],
            total_amount=from_cents(cents),
            transaction_count=transaction_count,
        )

    @classmethod
    def compose_revenue_breakdown(
        cls,
        categories: Iterable[RevenueCategory],
        uncategorized_revenue: Optional[Decimal] = None,
        pass_through_totals: Iterable[PassThroughTotal] = (),
    ) -> RevenueBreakdown:
        """
        Build the revenue breakdown.

        Args:
            categories: Categorized POS sales summed per account
            uncategorized_revenue: Sales with no account assigned
            pass_through_totals: POS adjustment lines summed by adjustment type

        Returns:
            RevenueBreakdown with net revenue = gross - discounts - refunds
        """
        categories = list(categories)
        adjustments: Dict[str, PassThroughTotal] = {
            row.adjustment_type: row for row in pass_through_totals
        }

        def adjustment_cents(adjustment_type: PassThroughType) -> int:
            row = adjustments.get(adjustment_type.value)
            return to_cents(row.total_amount) if row else 0

        def adjustment_count(adjustment_type: PassThroughType) -> int:
            row = adjustments.get(adjustment_type.value)
            return row.transaction_count if row else 0

        adjustment_tax_c = adjustment_cents(PassThroughType.TAX)
        adjustment_tips_c = adjustment_cents(PassThroughType.TIP)
        adjustment_service_c = adjustment_cents(PassThroughType.SERVICE_CHARGE)
        adjustment_fees_c = adjustment_cents(PassThroughType.FEE)
        adjustment_discounts_c = abs(adjustment_cents(PassThroughType.DISCOUNT))

        revenue_categories = sorted(
            (c for c in categories if AccountClassifier.is_core_revenue_category(c)),
            key=lambda c: c.account_code or "",
        )
        discount_categories = [c for c in categories if AccountClassifier.is_discount_category(c)]
        refund_categories = [c for c in categories if AccountClassifier.is_refund_category(c)]
        tax_categories = [c for c in categories if AccountClassifier.is_sales_tax_category(c)]
        tip_categories = [c for c in categories if AccountClassifier.is_tip_category(c)]
        other_liability_categories = sorted(
            (c for c in categories if AccountClassifier.is_other_liability_category(c)),
            key=lambda c: c.account_code or "",
        )

        categorized_c = sum(to_cents(c.total_amount) for c in revenue_categories)
        pass_through_ids = {id(c) for c in tax_categories + tip_categories + other_liability_categories}
        has_categorized_sales = any(
            c.transaction_count > 0 or to_cents(c.total_amount) != 0
            for c in categories
            if id(c) not in pass_through_ids
        )
        discounts_c = sum(abs(to_cents(c.total_amount)) for c in discount_categories)
        refunds_c = sum(abs(to_cents(c.total_amount)) for c in refund_categories)
        tax_c = sum(to_cents(c.total_amount) for c in tax_categories)
        tips_c = sum(to_cents(c.total_amount) for c in tip_categories)
        other_liabilities_c = sum(to_cents(c.total_amount) for c in other_liability_categories)

        # Display-only rows; their amounts are already in the adjustment totals
        if not tax_categories and adjustment_tax_c > 0:
            tax_categories.append(cls._synthetic_category(
                PassThroughType.TAX, adjustment_tax_c,
                adjustment_count(PassThroughType.TAX), SALES_TAX_DISPLAY,
            ))
        if not tip_categories and adjustment_tips_c > 0:
            tip_categories.append(cls._synthetic_category(
                PassThroughType.TIP, adjustment_tips_c,
                adjustment_count(PassThroughType.TIP), TIPS_DISPLAY,
            ))

        combined_tax_c = tax_c + adjustment_tax_c
        combined_tips_c = tips_c + adjustment_tips_c
        combined_other_c = other_liabilities_c + adjustment_service_c + adjustment_fees_c
        combined_discounts_c = discounts_c + adjustment_discounts_c

        uncategorized_c = to_cents(uncategorized_revenue)
        gross_c = categorized_c + uncategorized_c
        net_c = gross_c - combined_discounts_c - refunds_c
        collected_c = gross_c + combined_tax_c + combined_tips_c + combined_other_c

        adjustment_amounts = {
            PassThroughType.TAX: adjustment_tax_c,
            PassThroughType.TIP: adjustment_tips_c,
            PassThroughType.SERVICE_CHARGE: adjustment_service_c,
            PassThroughType.FEE: adjustment_fees_c,
            PassThroughType.DISCOUNT: adjustment_discounts_c,
        }
        adjustment_rows: List[PassThroughTotal] = [
            PassThroughTotal(
                adjustment_type=adjustment_type.value,
                total_amount=from_cents(adjustment_amounts[adjustment_type]),
                transaction_count=adjustment_count(adjustment_type),
            )
            for adjustment_type in ADJUSTMENT_ORDER
            if adjustment_amounts[adjustment_type] > 0
        ]

        if gross_c > 0:
            rate = (Decimal(categorized_c) / Decimal(gross_c) * 100).quantize(Decimal("0.01"))
        else:
            rate = Decimal("0.00")

        return RevenueBreakdown(
            revenue_categories=revenue_categories,
            discount_categories=discount_categories,
            refund_categories=refund_categories,
            tax_categories=tax_categories,
            tip_categories=tip_categories,
            other_liability_categories=other_liability_categories,
            adjustments=adjustment_rows,
            uncategorized_revenue=from_cents(uncategorized_c),
            totals=RevenueBreakdownTotals(
                total_collected_at_pos=from_cents(collected_c),
                gross_revenue=from_cents(gross_c),
                categorized_revenue=from_cents(categorized_c),
                uncategorized_revenue=from_cents(uncategorized_c),
                total_discounts=from_cents(combined_discounts_c),
                total_refunds=from_cents(refunds_c),
                net_revenue=from_cents(net_c),
                sales_tax=from_cents(combined_tax_c),
                tips=from_cents(combined_tips_c),
                other_liabilities=from_cents(combined_other_c),
            ),
            has_categorization_data=has_categorized_sales,
            categorization_rate=rate,
        )
