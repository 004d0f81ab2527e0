"""
Main Orchestrator for Expense Tracker

This module ties the pieces together and defines the ledger operations:
1. Overview (load → aggregate)
2. Add expense (normalize → build entry → prepend → save)
3. Remove expense (find by id → drop → save)
4. Reset (empty ledger → save)
5. Set salary (normalize → replace salary → save)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Loosely typed input is coerced here, the core only sees strict types
- Invalid input never reaches storage
- Every mutation is a full read-modify-write of the ledger
- Every step is audited

Within one process, mutations are serialized by a lock so two requests
cannot interleave their read-modify-write cycles. Separate processes
sharing one ledger file are not coordinated: the last write wins.
"""

import asyncio
import secrets
from typing import Any, Optional
from uuid import UUID

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import get_settings
from expense_tracker.models.ledger import (
    Entry,
    LedgerState,
    Totals,
    current_timestamp_ms,
)
from expense_tracker.queries import aggregate
from expense_tracker.services.storage import (
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    StorageError,
)
from expense_tracker.validation import (
    is_finite_number,
    is_valid_amount,
    normalize_amount,
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class AmountValidationError(LedgerError):
    """The supplied amount could not be normalized."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r}")


class EntryNotFoundError(LedgerError):
    """No entry carries the requested id."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")


def generate_entry_id() -> str:
    """
    Create an entry id: creation time plus a random suffix.

    Collisions are improbable, not impossible.
    """
    return f"entry_{current_timestamp_ms()}_{secrets.token_hex(6)}"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


class LedgerFlow:
    """
    Orchestrates every operation on the ledger.

    All operations return freshly computed Totals; nothing derived is
    ever stored.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._lock = asyncio.Lock()

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    async def _load(self, operation: str, correlation_id: UUID) -> LedgerState:
        try:
            return await self._storage.load()
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

    async def _save(self, state: LedgerState, operation: str, correlation_id: UUID) -> None:
        try:
            await self._storage.save(state)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

    async def _reject(self, field: str, value: Any, correlation_id: UUID) -> None:
        if self._audit_logger:
            await self._audit_logger.log_validation_failed(
                field=field,
                raw_input=value,
                correlation_id=correlation_id,
            )
        raise AmountValidationError(field, value)

    async def get_overview(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[LedgerState, Totals]:
        """
        Load the ledger and compute its totals.

        Returns:
            (state, totals) with entries newest first
        """
        correlation_id = correlation_id or create_correlation_id()
        state = await self._load("overview", correlation_id)
        return state, aggregate(state)

    async def add_expense(
        self,
        amount: Any = None,
        raw_value: Any = None,
        label: Any = None,
        entry_id: Any = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Entry, Totals]:
        """
        Record a new expense at the top of the ledger.

        A finite numeric amount is used as-is. Otherwise raw_value (or,
        when absent, amount) is normalized from text.

        Returns:
            (entry, totals)

        Raises:
            AmountValidationError: If no valid amount can be derived.
                The ledger is left untouched.
        """
        correlation_id = correlation_id or create_correlation_id()
        source = raw_value if raw_value is not None else amount

        if is_finite_number(amount):
            value = float(amount)
        else:
            value = normalize_amount(source)

        if not is_valid_amount(value):
            await self._reject("amount", source, correlation_id)

        entry = Entry(
            id=(_as_text(entry_id) if entry_id else "") or generate_entry_id(),
            amount=value,
            raw_value=_as_text(source),
            label=_as_text(label),
            created_at=current_timestamp_ms(),
        )

        async with self._lock:
            state = await self._load("add_expense", correlation_id)
            updated = state.model_copy(update={"entries": [entry, *state.entries]})
            await self._save(updated, "add_expense", correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_entry_added(
                entry_id=entry.id,
                amount=entry.amount,
                label=entry.label,
                correlation_id=correlation_id,
            )

        return entry, aggregate(updated)

    async def remove_expense(
        self,
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Totals:
        """
        Remove the entry with the given id.

        Ids are unique in normal operation. If a hand-edited ledger holds
        duplicates, every entry with that id is removed.

        Raises:
            EntryNotFoundError: If no entry has that id. Nothing is written.
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            state = await self._load("remove_expense", correlation_id)
            kept = [entry for entry in state.entries if entry.id != entry_id]
            removed_count = len(state.entries) - len(kept)

            if removed_count == 0:
                if self._audit_logger:
                    await self._audit_logger.log_entry_not_found(
                        entry_id=entry_id,
                        correlation_id=correlation_id,
                    )
                raise EntryNotFoundError(entry_id)

            updated = state.model_copy(update={"entries": kept})
            await self._save(updated, "remove_expense", correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_entry_removed(
                entry_id=entry_id,
                removed_count=removed_count,
                correlation_id=correlation_id,
            )

        return aggregate(updated)

    async def reset(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> Totals:
        """Clear every entry and set the salary back to 0."""
        correlation_id = correlation_id or create_correlation_id()
        cleared = LedgerState.empty()

        async with self._lock:
            await self._save(cleared, "reset", correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_ledger_reset(correlation_id=correlation_id)

        return aggregate(cleared)

    async def set_salary(
        self,
        amount: Any,
        correlation_id: Optional[UUID] = None,
    ) -> Totals:
        """
        Replace the salary, keeping every entry.

        Raises:
            AmountValidationError: If amount cannot be normalized.
        """
        correlation_id = correlation_id or create_correlation_id()
        value = normalize_amount(amount)

        if not is_valid_amount(value):
            await self._reject("salary", amount, correlation_id)

        async with self._lock:
            state = await self._load("set_salary", correlation_id)
            previous = state.salary
            updated = state.model_copy(update={"salary": value})
            await self._save(updated, "set_salary", correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_salary_updated(
                previous=previous,
                salary=value,
                correlation_id=correlation_id,
            )

        return aggregate(updated)


def create_app_components(
    use_storage: bool = True,
) -> LedgerFlow:
    """
    Factory function to create the ledger flow with its collaborators.

    Args:
        use_storage: Whether to persist to the configured JSON file.
                    Set to False for an in-memory ledger.

    Returns:
        A ready LedgerFlow
    """
    storage_settings = get_settings().storage

    audit_storage = None
    if storage_settings.audit_log_path:
        audit_storage = JsonLinesAuditStorage(storage_settings.audit_log_path)
    audit_logger = AuditLogger(audit_storage)

    if use_storage:
        storage = JsonFileLedgerStorage(
            storage_settings.data_path,
            on_recovered=audit_logger.log_ledger_recovered,
        )
    else:
        storage = InMemoryLedgerStorage()

    return LedgerFlow(storage=storage, audit_logger=audit_logger)
