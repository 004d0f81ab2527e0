"""Ledger totals package."""

from expense_tracker.queries.totals import aggregate

__all__ = ["aggregate"]
