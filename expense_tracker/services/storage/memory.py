"""
In-Memory Storage Implementation

Keeps the ledger as a plain document in process memory. Used by the
tests and for throwaway runs where nothing should touch the disk.
"""

import copy
from typing import Optional

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.ledger import LedgerState
from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Ledger storage that lives and dies with the process."""

    def __init__(self, initial: Optional[LedgerState] = None):
        self._document = (initial or LedgerState.empty()).to_document()
        self.save_count = 0

    @property
    def document(self) -> dict:
        """A copy of the stored document, as it would appear on disk."""
        return copy.deepcopy(self._document)

    async def load(self) -> LedgerState:
        return LedgerState.model_validate(copy.deepcopy(self._document))

    async def save(self, state: LedgerState) -> None:
        self._document = state.to_document()
        self.save_count += 1


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit storage kept in a list, oldest first."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
