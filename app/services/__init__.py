"""
Restaurant Ledger - Services Package

Business logic layer.
"""
