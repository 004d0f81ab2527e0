"""
Expense Tracker - Source Package

A small personal finance tracker: one monthly salary figure, a list of
expense entries, and the balance that remains.

DESIGN PRINCIPLES:
1. Amounts are normalized once, at the boundary
2. Totals are derived on every read, never stored
3. Bad persisted data degrades to an empty ledger, never a crash
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
