"""Configuration management."""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class SlackConfig:
    """Slack settings."""
    bot_token: str = ""
    channel_id: str = ""
    timeout: float = 30.0


@dataclass
class SourceConfig:
    """Kakao channel settings."""
    kind: str = "api"  # "api" or "html"
    channel_url: str = "https://pf.kakao.com/_LCxlxlxb/posts"
    timeout: float = 30.0


@dataclass
class ScheduleConfig:
    """Weekly run settings."""
    cron: str = "0 9 * * 1"
    timezone: str = "Asia/Seoul"
    max_attempts: int = 6
    retry_delay_minutes: float = 60.0


@dataclass
class PeriodConfig:
    """Week boundary settings. Weekday numbering: Monday=0 ... Sunday=6."""
    anchor_weekday: int = 0


@dataclass
class PathsConfig:
    """Path settings."""
    data_dir: Path = Path("data")


@dataclass
class Settings:
    """Application settings."""

    environment: str = "development"

    slack: SlackConfig = field(default_factory=SlackConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    period: PeriodConfig = field(default_factory=PeriodConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def retry_delay(self) -> timedelta:
        return timedelta(minutes=self.schedule.retry_delay_minutes)

    @property
    def data_dir(self) -> Path:
        return self.paths.data_dir

    def missing_required(self) -> list[str]:
        """Names of required values that are not set."""
        required = {
            "SLACK_BOT_TOKEN": self.slack.bot_token,
            "SLACK_CHANNEL_ID": self.slack.channel_id,
        }
        return [name for name, value in required.items() if not value]

    def validate(self) -> None:
        """Fail on missing required values in production."""
        missing = self.missing_required()
        if missing and self.environment == "production":
            raise ValueError(f"Missing required settings: {', '.join(missing)}")
        if not 0 <= self.period.anchor_weekday <= 6:
            raise ValueError("period.anchor_weekday must be between 0 and 6")


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(environment=os.getenv("MENU_NOTIFIER_ENV", "development"))

    # Apply YAML config
    if "slack" in config:
        for key, value in config["slack"].items():
            setattr(settings.slack, key, value)

    if "source" in config:
        for key, value in config["source"].items():
            setattr(settings.source, key, value)

    if "schedule" in config:
        for key, value in config["schedule"].items():
            setattr(settings.schedule, key, value)

    if "period" in config:
        for key, value in config["period"].items():
            setattr(settings.period, key, value)

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value))

    # Secrets and deploy-specific values from environment win over the file
    settings.slack.bot_token = os.getenv("SLACK_BOT_TOKEN", settings.slack.bot_token)
    settings.slack.channel_id = os.getenv("SLACK_CHANNEL_ID", settings.slack.channel_id)
    settings.source.channel_url = os.getenv("KAKAO_CHANNEL_URL", settings.source.channel_url)

    data_dir: Optional[str] = os.getenv("MENU_NOTIFIER_DATA_DIR")
    if data_dir:
        settings.paths.data_dir = Path(data_dir)

    return settings
