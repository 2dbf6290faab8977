"""
Tests for YAML configuration loading.
"""

from datetime import time
from pathlib import Path

import pytest

from bookingdesk.config import AppConfig, BusinessHoursConfig


def _write(tmp_path: Path, text: str) -> Path:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(text, encoding="utf-8")
    return config_file


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.timezone == "UTC"
        assert config.exclude_days == []
        assert config.defaults.booking_window_days == 90
        assert config.defaults.months_ahead == 3
        assert config.defaults.duration_minutes == 60
        assert config.defaults.business_hours.get_start_time() == time(9, 0)
        assert not config.supabase.is_configured()

    def test_load_from_yaml(self, tmp_path):
        config_file = _write(
            tmp_path,
            """
supabase:
  url: "https://demo.supabase.co/"
  anon_key: "anon"
business_id: "sparkle-home"
timezone: "Europe/London"
exclude_days: [6, 6, 5]
defaults:
  business_hours:
    start: "08:30:00"
    end: "16:00"
  booking_window_days: 30
""",
        )

        config = AppConfig.load_from_yaml(config_file)

        assert config.supabase.url == "https://demo.supabase.co"
        assert config.supabase.is_configured()
        assert config.exclude_days == [6, 5]
        assert config.defaults.business_hours.start == "08:30"
        assert config.defaults.booking_window_days == 30
        assert config.defaults.duration_minutes == 60

    def test_empty_file_uses_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))
        assert config.business_id is None

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping_raises(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- just\n- a list\n"))

    def test_invalid_yaml_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "supabase: [unclosed\n"))

    def test_invalid_exclude_day(self):
        with pytest.raises(ValueError):
            AppConfig(exclude_days=[7])

    def test_non_positive_window(self):
        with pytest.raises(ValueError):
            AppConfig(defaults={"booking_window_days": 0})

    def test_resolve_business_id(self):
        config = AppConfig(business_id="sparkle-home")

        assert config.resolve_business_id(None) == "sparkle-home"
        assert config.resolve_business_id("green-thumb") == "green-thumb"

    def test_resolve_business_id_without_any(self):
        with pytest.raises(ValueError, match="No business given"):
            AppConfig().resolve_business_id(None)


class TestBusinessHoursConfig:
    """Tests for BusinessHoursConfig."""

    def test_end_before_start_raises(self):
        with pytest.raises(ValueError, match="later than"):
            BusinessHoursConfig(start="17:00", end="09:00")

    def test_invalid_time_raises(self):
        with pytest.raises(ValueError):
            BusinessHoursConfig(start="nine")

    def test_to_business_hours(self):
        hours = BusinessHoursConfig(start="10:00", end="14:00").to_business_hours()

        assert hours.start == time(10, 0)
        assert hours.end == time(14, 0)
