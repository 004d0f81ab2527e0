"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The ledger is kept in a JSON document on disk; an in-memory backend
covers tests and ephemeral runs.
"""

from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    LedgerStorageInterface,
    StorageError,
)
from expense_tracker.services.storage.json_file import (
    JsonFileLedgerStorage,
    parse_ledger_document,
)
from expense_tracker.services.storage.audit_file import JsonLinesAuditStorage
from expense_tracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # JSON file implementation
    "JsonFileLedgerStorage",
    "JsonLinesAuditStorage",
    "parse_ledger_document",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
]
