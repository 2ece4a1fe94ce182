"""Tests for configuration loading."""

from datetime import timedelta
from pathlib import Path

import pytest

from menu_notifier.config import get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SLACK_BOT_TOKEN",
        "SLACK_CHANNEL_ID",
        "KAKAO_CHANNEL_URL",
        "MENU_NOTIFIER_DATA_DIR",
        "MENU_NOTIFIER_ENV",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file(tmp_path) -> None:
    settings = get_settings(tmp_path / "missing.yaml")

    assert settings.schedule.cron == "0 9 * * 1"
    assert settings.schedule.timezone == "Asia/Seoul"
    assert settings.schedule.max_attempts == 6
    assert settings.retry_delay == timedelta(hours=1)
    assert settings.period.anchor_weekday == 0
    assert settings.source.kind == "api"
    assert settings.missing_required() == ["SLACK_BOT_TOKEN", "SLACK_CHANNEL_ID"]


def test_yaml_and_environment(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "source:\n"
        "  kind: html\n"
        "schedule:\n"
        "  max_attempts: 3\n"
        "  retry_delay_minutes: 30\n"
        "period:\n"
        "  anchor_weekday: 6\n"
        "paths:\n"
        "  data_dir: /var/lib/menu\n"
        "slack:\n"
        "  channel_id: C-FILE\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-env")
    monkeypatch.setenv("SLACK_CHANNEL_ID", "C-ENV")

    settings = get_settings(config_path)

    assert settings.source.kind == "html"
    assert settings.schedule.max_attempts == 3
    assert settings.retry_delay == timedelta(minutes=30)
    assert settings.period.anchor_weekday == 6
    assert settings.data_dir == Path("/var/lib/menu")
    assert settings.slack.bot_token == "xoxb-env"
    assert settings.slack.channel_id == "C-ENV"
    assert settings.missing_required() == []


def test_validate_in_production(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("MENU_NOTIFIER_ENV", "production")
    settings = get_settings(tmp_path / "missing.yaml")

    with pytest.raises(ValueError, match="SLACK_BOT_TOKEN"):
        settings.validate()


def test_validate_in_development_only_checks_values(tmp_path) -> None:
    settings = get_settings(tmp_path / "missing.yaml")
    settings.validate()

    settings.period.anchor_weekday = 9
    with pytest.raises(ValueError, match="anchor_weekday"):
        settings.validate()
