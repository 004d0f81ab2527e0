"""
JSON-Lines Audit Storage

Appends one JSON object per audit event to a text file. The file is
never rewritten, only appended to.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from expense_tracker.models.audit import AuditEvent
from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
)


class JsonLinesAuditStorage(AuditStorageInterface):
    """Audit trail stored as a JSON-lines file."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def append_event(self, event: AuditEvent) -> bool:
        """Append one event as a single line."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}")

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Read the newest events back, skipping lines that do not parse."""
        if not self._path.exists():
            return []

        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in reversed(lines):
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError):
                continue
            if len(events) >= limit:
                break

        return events
