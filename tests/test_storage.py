"""Tests for ledger and audit storage backends."""

import asyncio
import json

import pytest

from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.ledger import Entry, LedgerState
from expense_tracker.services.storage import (
    CorruptDataError,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    StorageError,
    parse_ledger_document,
)


class RecoveryRecorder:
    """Collects on_recovered callbacks."""

    def __init__(self):
        self.calls = []

    async def __call__(self, reason: str, skipped: int) -> None:
        self.calls.append((reason, skipped))


class TestParseLedgerDocument:
    """Tests for parse_ledger_document."""

    def test_object_layout(self):
        state, skipped = parse_ledger_document(json.dumps({
            "salary": 1200,
            "entries": [{"id": "a", "amount": 5, "rawValue": "5", "createdAt": 1}],
        }))
        assert skipped == 0
        assert state.salary == 1200
        assert state.entries[0].id == "a"

    def test_bare_array_is_read_as_entries(self):
        """Test the legacy layout: a bare list of entries."""
        state, skipped = parse_ledger_document(json.dumps([
            {"id": "a", "amount": 1},
            {"id": "b", "amount": 2},
        ]))
        assert state.salary == 0
        assert [entry.id for entry in state.entries] == ["a", "b"]

    def test_malformed_entries_are_skipped(self):
        state, skipped = parse_ledger_document(json.dumps({
            "salary": 10,
            "entries": [{"id": "ok", "amount": 1}, {"amount": 2}, "junk", {"id": "x", "amount": "nan"}],
        }))
        assert [entry.id for entry in state.entries] == ["ok"]
        assert skipped == 3

    def test_invalid_json_raises(self):
        with pytest.raises(CorruptDataError):
            parse_ledger_document("{not json")

    def test_deeply_nested_json_raises(self):
        with pytest.raises(CorruptDataError, match="nested too deeply"):
            parse_ledger_document("[" * 100000)

    def test_scalar_document_raises(self):
        with pytest.raises(CorruptDataError, match="expected an object or array"):
            parse_ledger_document("42")


class TestJsonFileLedgerStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_is_created(self, tmp_path):
        path = tmp_path / "data" / "entries.json"
        storage = JsonFileLedgerStorage(path)

        state = asyncio.run(storage.load())

        assert state == LedgerState.empty()
        assert json.loads(path.read_text(encoding="utf-8")) == {"salary": 0.0, "entries": []}

    def test_empty_file_reads_as_empty_ledger(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text("   \n", encoding="utf-8")
        recorder = RecoveryRecorder()

        state = asyncio.run(JsonFileLedgerStorage(path, on_recovered=recorder).load())

        assert state == LedgerState.empty()
        assert recorder.calls == []

    def test_corrupt_file_degrades_to_empty_ledger(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text("{\"salary\": 5, \"entries\": [", encoding="utf-8")
        recorder = RecoveryRecorder()

        state = asyncio.run(JsonFileLedgerStorage(path, on_recovered=recorder).load())

        assert state == LedgerState.empty()
        assert len(recorder.calls) == 1
        assert recorder.calls[0][1] == 0

    def test_deeply_nested_file_degrades_to_empty_ledger(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text("[" * 100000, encoding="utf-8")
        recorder = RecoveryRecorder()

        state = asyncio.run(JsonFileLedgerStorage(path, on_recovered=recorder).load())

        assert state == LedgerState.empty()
        assert recorder.calls == [("document is nested too deeply", 0)]

    def test_non_utf8_file_degrades_to_empty_ledger(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        state = asyncio.run(JsonFileLedgerStorage(path).load())

        assert state == LedgerState.empty()

    def test_partial_recovery_reports_skipped_entries(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps({
            "salary": 900,
            "entries": [{"id": "a", "amount": 1}, {"label": "no id"}],
        }), encoding="utf-8")
        recorder = RecoveryRecorder()

        state = asyncio.run(JsonFileLedgerStorage(path, on_recovered=recorder).load())

        assert state.salary == 900
        assert [entry.id for entry in state.entries] == ["a"]
        assert recorder.calls == [("1 malformed entries skipped", 1)]

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "entries.json"
        storage = JsonFileLedgerStorage(path)
        state = LedgerState(
            salary=2500,
            entries=[Entry(id="b", amount=2, created_at=2), Entry(id="a", amount=1, created_at=1)],
        )

        asyncio.run(storage.save(state))
        loaded = asyncio.run(storage.load())

        assert loaded == state

    def test_saved_document_layout(self, tmp_path):
        """Test camelCase keys and two-space indentation on disk."""
        path = tmp_path / "entries.json"
        storage = JsonFileLedgerStorage(path)

        asyncio.run(storage.save(LedgerState(
            salary=1,
            entries=[Entry(id="a", amount=1, raw_value="1 €", created_at=7)],
        )))

        text = path.read_text(encoding="utf-8")
        assert text.startswith('{\n  "salary": 1.0,')
        assert '"rawValue": "1 €"' in text
        assert '"createdAt": 7' in text

    def test_save_leaves_no_temporary_files(self, tmp_path):
        path = tmp_path / "entries.json"
        storage = JsonFileLedgerStorage(path)

        asyncio.run(storage.save(LedgerState(salary=1)))
        asyncio.run(storage.save(LedgerState(salary=2)))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["entries.json"]

    def test_unreadable_path_raises_storage_error(self, tmp_path):
        """Test that a directory in place of the file is a storage failure."""
        path = tmp_path / "entries.json"
        path.mkdir()
        storage = JsonFileLedgerStorage(path)

        with pytest.raises(StorageError):
            asyncio.run(storage.load())
        with pytest.raises(StorageError):
            asyncio.run(storage.save(LedgerState.empty()))
        assert list(path.iterdir()) == []


class TestInMemoryLedgerStorage:
    """Tests for the in-memory backend."""

    def test_load_returns_independent_copies(self):
        storage = InMemoryLedgerStorage(LedgerState(salary=3))

        first = asyncio.run(storage.load())
        asyncio.run(storage.save(first.model_copy(update={"salary": 4})))

        assert first.salary == 3
        assert asyncio.run(storage.load()).salary == 4
        assert storage.save_count == 1


class TestJsonLinesAuditStorage:
    """Tests for the JSON-lines audit backend."""

    def test_append_and_read_back_newest_first(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "logs" / "audit.jsonl")
        first = AuditEventBuilder.system_error("first", "boom")
        second = AuditEventBuilder.system_error("second", "boom")

        assert asyncio.run(storage.append_event(first)) is True
        assert asyncio.run(storage.append_event(second)) is True

        events = asyncio.run(storage.get_recent_events())
        assert [event.event_id for event in events] == [second.event_id, first.event_id]

    def test_unparseable_lines_are_skipped(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        event = AuditEventBuilder.system_error("kept", "boom")
        path.write_text(event.to_json_line() + "\nnot json\n\n", encoding="utf-8")

        events = asyncio.run(JsonLinesAuditStorage(path).get_recent_events())

        assert [e.event_id for e in events] == [event.event_id]

    def test_limit(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        for i in range(5):
            asyncio.run(storage.append_event(AuditEventBuilder.system_error(str(i), "boom")))

        assert len(asyncio.run(storage.get_recent_events(limit=2))) == 2

    def test_missing_file_has_no_events(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "absent.jsonl")
        assert asyncio.run(storage.get_recent_events()) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
