from datetime import datetime, timedelta, timezone

import pytest

from tasknotes.core.config import Settings
from tasknotes.core.exceptions import ValidationError
from tasknotes.core.logging import configure_logging
from tasknotes.utils.validation import (
    escape_like,
    parse_legacy_timestamp,
    require_text,
    require_texts,
    to_naive_utc,
    validate_hex_color,
)


class TestValidationHelpers:
    """Test shared field validators."""

    @pytest.mark.parametrize("color", ["#6200ee", "#FFF", "", None])
    def test_valid_hex_colors(self, color):
        assert validate_hex_color(color) is True

    @pytest.mark.parametrize("color", ["6200ee", "#12345", "#GGGGGG", "red"])
    def test_invalid_hex_colors(self, color):
        assert validate_hex_color(color) is False

    def test_require_text_strips(self):
        assert require_text("  hello ", "title") == "hello"

    @pytest.mark.parametrize("value", [None, "", "   ", "\n"])
    def test_require_text_blank(self, value):
        with pytest.raises(ValidationError) as exc_info:
            require_text(value, "title")

        assert exc_info.value.field == "title"
        assert isinstance(exc_info.value, ValueError)

    def test_require_texts_reports_index(self):
        with pytest.raises(ValidationError) as exc_info:
            require_texts(["a", "b", ""], "tasks")

        assert exc_info.value.field == "tasks[2]"

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
        assert escape_like("plain") == "plain"


class TestSettings:
    """Test configuration parsing."""

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TASKNOTES_DATABASE_URL", "sqlite+aiosqlite:///./other.db")
        monkeypatch.setenv("TASKNOTES_PROPAGATE_CATEGORY_RENAMES", "false")
        monkeypatch.setenv("TASKNOTES_LOG_LEVEL", " debug ")

        settings = Settings(_env_file=None)

        assert settings.DATABASE_URL == "sqlite+aiosqlite:///./other.db"
        assert settings.PROPAGATE_CATEGORY_RENAMES is False
        assert settings.LOG_LEVEL == "DEBUG"

    def test_rejects_bad_default_color(self, monkeypatch):
        monkeypatch.setenv("TASKNOTES_DEFAULT_CATEGORY_COLOR", "purple")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_configure_logging_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging(level="LOUD")

    def test_configure_logging(self):
        configure_logging(level="debug", json_logs=True)
        configure_logging(level="WARNING", json_logs=False)

    def test_only_used_settings_are_declared(self, monkeypatch):
        monkeypatch.setenv("TASKNOTES_DEBUG", "true")

        settings = Settings(_env_file=None)

        assert set(Settings.model_fields) == {
            "DATABASE_URL",
            "ECHO_SQL",
            "DEFAULT_CATEGORY_COLOR",
            "PROPAGATE_CATEGORY_RENAMES",
            "LOG_LEVEL",
            "LOG_JSON",
        }
        assert not hasattr(settings, "DEBUG")


class TestTimestamps:
    """Test reminder timestamp normalisation."""

    def test_to_naive_utc(self):
        aware = datetime(2024, 2, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        assert to_naive_utc(aware) == datetime(2024, 2, 1, 8, 0)
        assert to_naive_utc(datetime(2024, 2, 1, 8, 0)) == datetime(2024, 2, 1, 8, 0)
        assert to_naive_utc(None) is None

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-02-01T08:00:00.000Z", datetime(2024, 2, 1, 8, 0)),
            ("2024-02-01T10:30:00+02:00", datetime(2024, 2, 1, 8, 30)),
            ("2024-02-01 08:00:00.000000", datetime(2024, 2, 1, 8, 0)),
        ],
    )
    def test_parse_legacy_timestamp(self, raw, expected):
        assert parse_legacy_timestamp(raw) == expected

    def test_parse_legacy_timestamp_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_legacy_timestamp("next tuesday")
