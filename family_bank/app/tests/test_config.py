from decimal import Decimal

import pytest

from ..core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = Settings()

    assert settings.app_name == "Family Bank API"
    assert settings.database_url == "sqlite:///family_bank.db"
    assert settings.interest_rate == 0
    assert settings.recent_activity_days == 7
    assert settings.history_page_size == 50


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FAMILY_BANK_INTEREST_RATE", "2.25")
    monkeypatch.setenv("FAMILY_BANK_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FAMILY_BANK_HISTORY_PAGE_SIZE", "10")

    settings = Settings()

    assert settings.interest_rate == Decimal("2.25")
    assert settings.log_level == "DEBUG"
    assert settings.history_page_size == 10


def test_env_file_is_read(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("FAMILY_BANK_RECENT_ACTIVITY_DAYS=14\nOTHER_SETTING=x\n")

    assert Settings().recent_activity_days == 14
