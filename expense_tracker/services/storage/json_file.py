"""
JSON File Storage Implementation

The ledger lives in a single JSON document:

    {
      "salary": 2500,
      "entries": [ {id, amount, rawValue, label, createdAt, type}, ... ]
    }

Reading is forgiving:
- a missing file is created with an empty ledger
- an empty or unparseable file reads as an empty ledger
- a bare JSON array (the oldest layout) is read as the entry list
- entries that fail validation are skipped, the rest are kept

Writing is atomic: the document goes to a temporary file in the same
directory which then replaces the existing file, so a crash mid-write never
leaves a truncated ledger behind.

TRADEOFFS:
- Whole-document rewrites on every change (fine for a personal ledger)
- No cross-process locking; two processes writing the same file race
  and the last write wins
"""

import json
import os
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from expense_tracker.config import get_settings
from expense_tracker.models.ledger import Entry, LedgerState
from expense_tracker.services.storage.interface import (
    CorruptDataError,
    LedgerStorageInterface,
    StorageError,
)

# Called with (reason, skipped_entries) whenever load() had to degrade
RecoveryHook = Callable[[str, int], Awaitable[None]]


def parse_ledger_document(content: str) -> tuple[LedgerState, int]:
    """
    Parse the text of a ledger document.

    Returns:
        (state, skipped_entries)

    Raises:
        CorruptDataError: If the content is not JSON or not a ledger shape
    """
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise CorruptDataError(f"invalid JSON at line {e.lineno}: {e.msg}")
    except RecursionError:
        raise CorruptDataError("document is nested too deeply")

    if isinstance(payload, list):
        salary = 0
        raw_entries = payload
    elif isinstance(payload, dict):
        salary = payload.get("salary")
        raw_entries = payload.get("entries")
        if not isinstance(raw_entries, list):
            raw_entries = []
    else:
        raise CorruptDataError(
            f"expected an object or array, got {type(payload).__name__}"
        )

    entries = []
    skipped = 0
    for raw in raw_entries:
        try:
            entries.append(Entry.model_validate(raw))
        except ValidationError:
            skipped += 1  # Skip malformed entries

    return LedgerState(salary=salary, entries=entries), skipped


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger storage backed by one JSON file on local disk.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        on_recovered: Optional[RecoveryHook] = None,
    ):
        """
        Args:
            path: Ledger document location. Defaults to the configured
                  EXPENSE_TRACKER_DATA_PATH.
            on_recovered: Awaited when a load had to discard data.
        """
        self._path = Path(path) if path is not None else get_settings().storage.data_path
        self._on_recovered = on_recovered
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_file(self) -> None:
        """Create the document with an empty ledger if it does not exist."""
        if not self._path.exists():
            self._write_atomic(self._serialize(LedgerState.empty()))
            self._logger.info("ledger_created", path=str(self._path))

    @staticmethod
    def _serialize(state: LedgerState) -> str:
        return json.dumps(state.to_document(), indent=2, ensure_ascii=False)

    def _write_atomic(self, content: str) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=directory,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    async def _recovered(self, reason: str, skipped: int) -> None:
        self._logger.warning(
            "ledger_recovered",
            path=str(self._path),
            reason=reason,
            skipped_entries=skipped,
        )
        if self._on_recovered:
            await self._on_recovered(reason, skipped)

    async def load(self) -> LedgerState:
        """Read the ledger document, degrading to an empty ledger on bad data."""
        try:
            self._ensure_file()
            raw = self._path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read ledger: {e}")

        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            await self._recovered("document is not valid UTF-8", 0)
            return LedgerState.empty()

        if not content.strip():
            return LedgerState.empty()

        try:
            state, skipped = parse_ledger_document(content)
        except CorruptDataError as e:
            await self._recovered(str(e), 0)
            return LedgerState.empty()

        if skipped:
            await self._recovered(f"{skipped} malformed entries skipped", skipped)

        return state

    async def save(self, state: LedgerState) -> None:
        """Atomically replace the ledger document."""
        try:
            self._write_atomic(self._serialize(state))
        except OSError as e:
            raise StorageError(f"Failed to write ledger: {e}")
