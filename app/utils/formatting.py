"""
Restaurant Ledger - Formatting Utilities

Money and label formatting shared by reports, warnings and exports.
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from app.config import settings

CENT = Decimal("0.01")


def quantize_money(amount: Union[Decimal, int, float, str, None]) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(str(amount or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(
    amount: Union[Decimal, int, float, str, None],
    symbol: Optional[str] = None,
) -> str:
    """
    Format an amount for display.

    >>> format_currency(Decimal("1200"))
    '$1,200.00'
    >>> format_currency(Decimal("-100"))
    '($100.00)'
    """
    symbol = settings.currency_symbol if symbol is None else symbol
    value = quantize_money(amount)
    formatted = f"{symbol}{abs(value):,.2f}"
    if value < 0:
        return f"({formatted})"
    return formatted


def slugify(value: str) -> str:
    """Lowercase, hyphen-separated label for filenames."""
    slug = re.sub(r"['’]", "", (value or "").lower())
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")
