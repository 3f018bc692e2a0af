"""Tests for dayplanner.config: Settings parsing and validation."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from dayplanner.config import Settings, _load_settings, configure_logging, settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.PLANNER_DATABASE_PATH == "data/planner.db"
        assert s.PLANNER_STORAGE_BACKEND == "sqlite"
        assert s.PLANNER_STORAGE_QUOTA_BYTES == 5 * 1024 * 1024
        assert s.PLANNER_DEBOUNCE_MS == 500
        assert s.LOG_LEVEL == "INFO"

    def test_numeric_strings_are_parsed(self):
        s = Settings(PLANNER_DEBOUNCE_MS="250", PLANNER_STORAGE_QUOTA_BYTES="0")
        assert s.PLANNER_DEBOUNCE_MS == 250
        assert s.PLANNER_STORAGE_QUOTA_BYTES == 0

    def test_negative_debounce_rejected(self):
        with pytest.raises(ValidationError):
            Settings(PLANNER_DEBOUNCE_MS="-1")

    def test_backend_normalized(self):
        assert Settings(PLANNER_STORAGE_BACKEND=" Memory ").PLANNER_STORAGE_BACKEND == "memory"

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(PLANNER_STORAGE_BACKEND="redis")

    def test_log_level_uppercased(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PLANNER_DATABASE_PATH", "/tmp/other.db")
        monkeypatch.setenv("PLANNER_DEBOUNCE_MS", "1000")
        s = _load_settings()
        assert s.PLANNER_DATABASE_PATH == "/tmp/other.db"
        assert s.PLANNER_DEBOUNCE_MS == 1000


class TestConfigureLogging:
    def test_uses_project_format(self):
        with patch("dayplanner.config.logging.basicConfig") as mock_basic:
            configure_logging("WARNING")
        kwargs = mock_basic.call_args.kwargs
        assert kwargs["level"] == "WARNING"
        assert "%(name)s" in kwargs["format"]

    def test_defaults_to_settings_level(self):
        with patch("dayplanner.config.logging.basicConfig") as mock_basic:
            configure_logging()
        assert mock_basic.call_args.kwargs["level"] == settings.LOG_LEVEL
