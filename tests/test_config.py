# tests/test_config.py
"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from investment_tracker.config import Settings


class TestSettings:
    """Tests for Settings validation."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("HOME_CURRENCY", raising=False)
        monkeypatch.delenv("IMPORT_MAX_ROWS", raising=False)

        settings = Settings(_env_file=None)

        assert settings.home_currency == "TWD"
        assert settings.import_max_rows == 5000
        assert settings.import_notes_max_length == 500

    def test_home_currency_is_normalized(self):
        settings = Settings(home_currency=" usd ", _env_file=None)

        assert settings.home_currency == "USD"

    @pytest.mark.parametrize("value", ["US", "USDX", "U$D", ""])
    def test_invalid_home_currency_raises(self, value):
        with pytest.raises(ValidationError):
            Settings(home_currency=value, _env_file=None)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("HOME_CURRENCY", "jpy")
        monkeypatch.setenv("IMPORT_MAX_ROWS", "100")

        settings = Settings(_env_file=None)

        assert settings.home_currency == "JPY"
        assert settings.import_max_rows == 100

    def test_row_limit_bounds(self):
        with pytest.raises(ValidationError):
            Settings(import_max_rows=0, _env_file=None)

    def test_environment_flags(self):
        assert Settings(environment="production", _env_file=None).is_production
        assert Settings(environment="test", _env_file=None).is_test
