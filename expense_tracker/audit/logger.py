"""
Audit Logger

DESIGN DECISION: Every ledger mutation and every rejected request is
logged. This provides:
1. A history of the ledger that survives deletes and resets
2. Debugging capability
3. A record of what the user actually typed when input was rejected

The audit logger:
- Is async so it can sit on the same path as storage calls
- Gracefully handles failures (never fails an operation because logging failed)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from collections.abc import Callable
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog
from pydantic import ValidationError

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder
from expense_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and so structlog) to stderr at the given level."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    # basicConfig is a no-op once handlers exist, the level still applies
    logging.getLogger().setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (always)
    2. An audit storage backend (when configured)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expense_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def _emit(self, build: Callable[..., AuditEvent], **fields: Any) -> bool:
        """Build an event and log it. A malformed event is reported, not raised."""
        try:
            event = build(**fields)
        except ValidationError as e:
            self._logger.error(
                "audit_event_invalid",
                builder=build.__name__,
                error=str(e),
            )
            return False
        return await self.log(event)

    async def log_entry_added(
        self,
        entry_id: str,
        amount: float,
        label: str,
        correlation_id: UUID,
    ) -> None:
        """Log a new expense."""
        await self._emit(
            AuditEventBuilder.entry_added,
            entry_id=entry_id,
            amount=amount,
            label=label,
            correlation_id=correlation_id,
        )

    async def log_entry_removed(
        self,
        entry_id: str,
        removed_count: int,
        correlation_id: UUID,
    ) -> None:
        await self._emit(
            AuditEventBuilder.entry_removed,
            entry_id=entry_id,
            removed_count=removed_count,
            correlation_id=correlation_id,
        )

    async def log_entry_not_found(
        self,
        entry_id: str,
        correlation_id: UUID,
    ) -> None:
        await self._emit(
            AuditEventBuilder.entry_not_found,
            entry_id=entry_id,
            correlation_id=correlation_id,
        )

    async def log_ledger_reset(
        self,
        correlation_id: UUID,
    ) -> None:
        await self._emit(
            AuditEventBuilder.ledger_reset,
            correlation_id=correlation_id,
        )

    async def log_salary_updated(
        self,
        previous: float,
        salary: float,
        correlation_id: UUID,
    ) -> None:
        await self._emit(
            AuditEventBuilder.salary_updated,
            previous=previous,
            salary=salary,
            correlation_id=correlation_id,
        )

    async def log_validation_failed(
        self,
        field: str,
        raw_input: Any,
        correlation_id: UUID,
    ) -> None:
        """Log rejected user input."""
        await self._emit(
            AuditEventBuilder.validation_failed,
            field=field,
            raw_input=raw_input,
            correlation_id=correlation_id,
        )

    async def log_ledger_recovered(
        self,
        reason: str,
        skipped_entries: int,
    ) -> None:
        """Log that stored data was discarded while loading."""
        await self._emit(
            AuditEventBuilder.ledger_recovered,
            reason=reason,
            skipped_entries=skipped_entries,
        )

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self._emit(
            AuditEventBuilder.storage_error,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self._emit(
            AuditEventBuilder.system_error,
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding an expense).
    Pass it through all subsequent operations.
    """
    return uuid4()
