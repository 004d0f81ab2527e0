"""
Audit Models for Expense Tracker

Every ledger mutation and every rejected request is recorded as an
audit event, so the history of a ledger can be reconstructed from the
log even after entries are deleted or the ledger is reset.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Longest piece of user text quoted in a description
DESCRIPTION_QUOTE_LIMIT = 100


def _quote(text: Any) -> str:
    text = str(text)
    if len(text) <= DESCRIPTION_QUOTE_LIMIT:
        return text
    return text[:DESCRIPTION_QUOTE_LIMIT] + "..."


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Entry lifecycle
    ENTRY_ADDED = "entry_added"
    ENTRY_REMOVED = "entry_removed"
    ENTRY_NOT_FOUND = "entry_not_found"

    # Ledger-wide changes
    LEDGER_RESET = "ledger_reset"
    SALARY_UPDATED = "salary_updated"

    # Input problems
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    LEDGER_RECOVERED = "ledger_recovered"
    STORAGE_ERROR = "storage_error"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'ledger')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by every event of one operation"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of a JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), ensure_ascii=False, default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_added(entry_id, amount, label, correlation_id)
        event = AuditEventBuilder.ledger_reset(correlation_id=correlation_id)
    """

    @staticmethod
    def entry_added(
        entry_id: str,
        amount: float,
        label: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_ADDED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Expense added: {_quote(label or 'unlabelled')} - {amount:.2f}",
            details={
                "amount": amount,
                "label": label,
            },
            is_user_action=True,
        )

    @staticmethod
    def entry_removed(
        entry_id: str,
        removed_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REMOVED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Expense removed: {_quote(entry_id)}",
            details={
                "removed_count": removed_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def entry_not_found(
        entry_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Removal requested for unknown entry: {_quote(entry_id)}",
        )

    @staticmethod
    def ledger_reset(
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="Ledger reset: salary and entries cleared",
            is_user_action=True,
        )

    @staticmethod
    def salary_updated(
        previous: float,
        salary: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SALARY_UPDATED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Salary set to {salary:.2f}",
            details={
                "previous": previous,
                "salary": salary,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        field: str,
        raw_input: Any,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Rejected {field}: not a valid amount",
            details={
                "field": field,
                "input": repr(raw_input),
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_recovered(
        reason: str,
        skipped_entries: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger document recovered: {_quote(reason)}",
            details={
                "reason": reason,
                "skipped_entries": skipped_entries,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Storage failure during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {_quote(error_type)}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
