"""
Unit tests for settings and logging setup.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from tagmatch.config import Settings, get_settings
from tagmatch.log import JsonFormatter, configure_logging
from tagmatch.matching import FilterOptions, match_string


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, settings):
        assert settings.match_ignore_case is True
        assert settings.match_near_character_recognition is True
        assert settings.near_match_min_length == 3
        assert settings.near_match_edit_ratio == 0.2
        assert settings.near_match_jaro_winkler_threshold == 0.95
        assert settings.near_match_jaro_winkler_min_length == 8
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TAGMATCH_NEAR_MATCH_EDIT_RATIO", "0.3")
        monkeypatch.setenv("TAGMATCH_MATCH_IGNORE_CASE", "false")

        current = Settings(_env_file=None)
        assert current.near_match_edit_ratio == 0.3
        assert current.match_ignore_case is False

    def test_log_values_normalized(self):
        current = Settings(_env_file=None, log_level="debug", log_format="JSON")
        assert current.log_level == "DEBUG"
        assert current.log_format == "json"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_ratio(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, near_match_edit_ratio=1.5)

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_settings_change_matching(self):
        strict = Settings(_env_file=None, match_ignore_case=False)
        assert match_string("foo", "Foo", settings=strict) == FilterOptions.NONE

    def test_thresholds_change_matching(self):
        loose = Settings(_env_file=None, near_match_min_length=2)
        assert match_string("sl", "Slushie", settings=loose) == FilterOptions.NEAR_NAME


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    """Tests for configure_logging."""

    def test_console(self, restore_logging):
        configure_logging(level="warning", fmt="console")
        assert restore_logging.level == logging.WARNING
        assert not isinstance(restore_logging.handlers[0].formatter, JsonFormatter)

    def test_json(self, restore_logging):
        configure_logging(level="DEBUG", fmt="json")
        assert restore_logging.level == logging.DEBUG
        assert isinstance(restore_logging.handlers[0].formatter, JsonFormatter)

    def test_json_formatter(self):
        record = logging.LogRecord(
            "tagmatch.test", logging.INFO, __file__, 1, "merged %d players", (2,), None,
        )
        payload = json.loads(JsonFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "tagmatch.test"
        assert payload["message"] == "merged 2 players"
