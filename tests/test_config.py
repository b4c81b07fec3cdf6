"""
Tests for configuration loading and validation.
"""

from pathlib import Path

import pytest

from proposetimes.config import AppConfig, validate_timezone_name


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.provider == "savvycal"
        assert config.timezone == "America/New_York"
        assert config.days_ahead == 10
        assert config.selection.max_slots == 4
        assert config.selection.increment_minutes == 30

    def test_load_from_yaml(self, tmp_path):
        path = _write(
            tmp_path,
            "provider: calcom\n"
            "timezone: Europe/London\n"
            "calcom:\n"
            "  username: testuser\n"
            "  event_slug: meeting\n"
            "selection:\n"
            "  max_slots: 3\n",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.provider == "calcom"
        assert config.timezone == "Europe/London"
        assert config.calcom.event_slug == "meeting"
        assert config.selection.max_slots == 3
        assert config.selection.increment_minutes == 30

    def test_empty_file_gives_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))

        assert config == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "provider: [unclosed\n"))

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError, match="mapping at the root level"):
            AppConfig.load_from_yaml(_write(tmp_path, "- savvycal\n- calcom\n"))

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            AppConfig(provider="outlook")

    def test_non_positive_selection_limits(self):
        with pytest.raises(ValueError):
            AppConfig(selection={"max_slots": 0})
        with pytest.raises(ValueError):
            AppConfig(selection={"increment_minutes": -30})

    def test_days_ahead_must_be_positive(self):
        with pytest.raises(ValueError, match="days_ahead must be at least 1"):
            AppConfig(days_ahead=0)

    def test_load_or_default_with_explicit_path(self, tmp_path):
        path = _write(tmp_path, "provider: mock\n")

        assert AppConfig.load_or_default(path).provider == "mock"

    def test_load_or_default_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_or_default(tmp_path / "missing.yaml")


def test_validate_timezone_name():
    assert validate_timezone_name("Asia/Tokyo") == "Asia/Tokyo"

    with pytest.raises(ValueError):
        validate_timezone_name("Not/AZone")


def test_savvycal_config_ignores_unused_keys():
    """Older config files carried a SavvyCal username; it is accepted and dropped."""
    config = AppConfig(savvycal={"token": "tok", "link": "chat", "username": "someone"})

    assert config.savvycal.link == "chat"
    assert not hasattr(config.savvycal, "username")
