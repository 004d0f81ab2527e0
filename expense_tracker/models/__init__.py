"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the ledger core must conform to these schemas.
"""

from expense_tracker.models.ledger import (
    AddEntryRequest,
    Entry,
    EntryType,
    LedgerState,
    SalaryRequest,
    Totals,
    current_timestamp_ms,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "AddEntryRequest",
    "Entry",
    "EntryType",
    "LedgerState",
    "SalaryRequest",
    "Totals",
    "current_timestamp_ms",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
