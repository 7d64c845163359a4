"""
Restaurant Ledger - Schemas Package

Pydantic schemas for ledger snapshots and statement responses.
"""
