"""
Core Data Models for Expense Tracker

These models define the strict shapes the ledger core works with:
1. Entry - one recorded expense
2. LedgerState - salary plus the ordered entry sequence
3. Totals - figures derived from a LedgerState on every read

Request bodies arrive loosely typed. They are captured as-is by the
request models at the bottom of this module and coerced by the
ledger flow before anything reaches the core.

DESIGN DECISION: Python attributes are snake_case while the persisted
document and the HTTP payloads use camelCase (rawValue, createdAt).
Aliases bridge the two; always dump with by_alias=True.
"""

import math
import time
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def current_timestamp_ms() -> int:
    """Milliseconds since the epoch, the unit used for createdAt."""
    return int(time.time() * 1000)


# =============================================================================
# ENUMS
# =============================================================================

class EntryType(str, Enum):
    """
    Kinds of ledger entry.

    Only expenses exist today. Totals still filter on the type so
    that other kinds can be added without touching the aggregator.
    """
    EXPENSE = "expense"


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Entry(BaseModel):
    """
    A single recorded expense.

    Entries are immutable once created; the only lifecycle events
    after creation are deletion by id and a full ledger reset.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Unique entry identifier"
    )
    amount: float = Field(
        ...,
        description="Normalized amount"
    )
    raw_value: str = Field(
        default="",
        alias="rawValue",
        description="Amount exactly as the user typed it (trimmed)"
    )
    label: str = Field(
        default="",
        description="Free-text label, may be empty"
    )
    created_at: int = Field(
        default_factory=current_timestamp_ms,
        alias="createdAt",
        description="Creation time in epoch milliseconds"
    )
    type: str = Field(
        default=EntryType.EXPENSE.value,
        description="Entry kind"
    )

    @field_validator('amount')
    @classmethod
    def amount_must_be_finite(cls, v: float) -> float:
        """NaN and infinities never enter the ledger."""
        if not math.isfinite(v):
            raise ValueError("Entry amount must be a finite number")
        return v

    @field_validator('raw_value', 'label', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v

    @field_validator('type', mode='before')
    @classmethod
    def default_type(cls, v: Any) -> Any:
        """Entries stored without a type are expenses."""
        if v is None or v == "":
            return EntryType.EXPENSE.value
        return v

    @property
    def is_expense(self) -> bool:
        return self.type == EntryType.EXPENSE.value

    def to_document(self) -> dict:
        """Convert to the persisted/wire representation."""
        return self.model_dump(by_alias=True)


class LedgerState(BaseModel):
    """
    The whole ledger: a salary figure and the entry sequence.

    Invariants:
    - salary is always finite (anything else becomes 0)
    - entries is always a list, newest entry first
    """
    model_config = ConfigDict(extra="ignore")

    salary: float = Field(
        default=0.0,
        description="Monthly salary"
    )
    entries: list[Entry] = Field(
        default_factory=list,
        description="Expense entries, newest first"
    )

    @field_validator('salary', mode='before')
    @classmethod
    def coerce_salary(cls, v: Any) -> float:
        """Missing, unparseable or non-finite salaries become 0."""
        if isinstance(v, bool) or v is None:
            return 0.0
        if isinstance(v, str):
            v = v.strip() or 0
        try:
            value = float(v)
        except (TypeError, ValueError, OverflowError):
            return 0.0
        return value if math.isfinite(value) else 0.0

    @field_validator('entries', mode='before')
    @classmethod
    def coerce_entries(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return []
        return list(v)

    @classmethod
    def empty(cls) -> "LedgerState":
        """A ledger with no salary and no entries."""
        return cls(salary=0.0, entries=[])

    def find(self, entry_id: str) -> list[Entry]:
        """All entries carrying the given id."""
        return [entry for entry in self.entries if entry.id == entry_id]

    def to_document(self) -> dict:
        """Convert to the persisted JSON document layout."""
        return {
            "salary": self.salary,
            "entries": [entry.to_document() for entry in self.entries],
        }


class Totals(BaseModel):
    """
    Figures derived from a ledger.

    Never persisted. Recomputed from the LedgerState on every read.
    """
    model_config = ConfigDict(frozen=True)

    salary: float = 0.0
    total_expenses: float = 0.0
    remaining: float = 0.0

    def to_payload(self) -> dict:
        """
        Convert to the HTTP response fields.

        'total' duplicates totalExpenses for older clients.
        """
        return {
            "salary": self.salary,
            "totalExpenses": self.total_expenses,
            "remaining": self.remaining,
            "total": self.total_expenses,
        }


# =============================================================================
# REQUEST MODELS (loosely typed, coerced by the ledger flow)
# =============================================================================

class AddEntryRequest(BaseModel):
    """Body of a create-entry request."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    amount: Any = None
    raw_value: Any = Field(default=None, alias="rawValue")
    label: Any = None
    id: Optional[Any] = None


class SalaryRequest(BaseModel):
    """Body of a set-salary request."""
    model_config = ConfigDict(extra="ignore")

    amount: Any = None
