"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON document for a real database later
2. Use in-memory storage for testing
3. Keep the ledger flow decoupled from where the bytes live

The ledger is always read and written as one whole document, so the
interface is just load and save.
"""

from abc import ABC, abstractmethod

from expense_tracker.models.ledger import LedgerState
from expense_tracker.models.audit import AuditEvent


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (JSON file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def load(self) -> LedgerState:
        """
        Load the current ledger.

        Returns:
            The stored ledger, or an empty ledger when nothing usable
            is stored. Bad data is never an error on this path.

        Raises:
            StorageError: If the backend cannot be read at all
        """
        pass

    @abstractmethod
    async def save(self, state: LedgerState) -> None:
        """
        Replace the stored ledger with state.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored content could not be interpreted as a ledger."""
    pass
