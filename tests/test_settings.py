"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest

from expense_tracker.config import (
    AppSettings,
    ServerSettings,
    StorageSettings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test without a .env file or inherited variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "EXPENSE_TRACKER_DATA_PATH",
        "EXPENSE_TRACKER_AUDIT_LOG_PATH",
        "EXPENSE_TRACKER_PORT",
        "PORT",
        "EXPENSE_TRACKER_CORS_ALLOW_ORIGINS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestStorageSettings:

    def test_defaults(self):
        settings = StorageSettings()
        assert settings.data_path == Path("data") / "entries.json"
        assert settings.audit_log_path is None

    def test_paths_from_env(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_DATA_PATH", "/tmp/ledger.json")
        monkeypatch.setenv("EXPENSE_TRACKER_AUDIT_LOG_PATH", "/tmp/audit.jsonl")
        settings = StorageSettings()
        assert settings.data_path == Path("/tmp/ledger.json")
        assert settings.audit_log_path == Path("/tmp/audit.jsonl")

    def test_blank_audit_path_is_disabled(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_AUDIT_LOG_PATH", "  ")
        assert StorageSettings().audit_log_path is None


class TestServerSettings:

    def test_default_port(self):
        assert ServerSettings().port == 3000

    def test_plain_port_variable(self, monkeypatch):
        """Test that the conventional PORT variable is honoured."""
        monkeypatch.setenv("PORT", "8080")
        assert ServerSettings().port == 8080

    def test_port_out_of_range(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_PORT", "70000")
        with pytest.raises(ValueError):
            ServerSettings()

    def test_cors_origins_list(self, monkeypatch):
        assert ServerSettings().cors_origins_list == ["*"]
        monkeypatch.setenv("EXPENSE_TRACKER_CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        assert ServerSettings().cors_origins_list == ["http://a.test", "http://b.test"]


class TestAppSettings:

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="Unsupported log level"):
            AppSettings()


def test_validate_all_settings_reports_failures(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    status = validate_all_settings()

    assert status["storage"] is True
    assert status["server"] is True
    assert status["app"] is False
    assert "Unsupported log level" in status["app_error"]
