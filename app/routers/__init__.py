"""
Restaurant Ledger - Routers Package

FastAPI route handlers.

Routers:
- financial_statements: Trial balance, income statement, balance sheet,
  cash flow and their CSV / PDF exports
"""

from app.routers import financial_statements

__all__ = [
    "financial_statements",
]
