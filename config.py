"""
Configuration module for the daily digest bot.
Loads settings from environment variables and settings.yaml.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

import yaml
from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


DEFAULT_USERNAME = "今日は何の日Bot"
DEFAULT_ICON_EMOJI = ":calendar:"


@dataclass
class SlackConfig:
    """Slack incoming webhook settings."""
    webhook_url: str
    username: str = DEFAULT_USERNAME
    icon_emoji: str = DEFAULT_ICON_EMOJI
    channel: Optional[str] = None


@dataclass
class BotConfig:
    """How much of each category to collect and show."""
    max_anniversaries: int = 5
    max_events: int = 5
    max_births: int = 5
    max_deaths: int = 3
    include_events: bool = True
    include_births: bool = True
    include_deaths: bool = True


@dataclass
class Config:
    """Main configuration container."""
    slack: SlackConfig

    # Timezone
    timezone: ZoneInfo
    run_hour: int

    bot: BotConfig = field(default_factory=BotConfig)

    # Paths
    project_root: Path = field(default_factory=lambda: Path(__file__).parent)


def _load_settings_file(path: Path) -> dict:
    """Read settings.yaml; a missing or empty file means no overrides."""
    if not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


class ConfigError(ValueError):
    """Raised when a setting can't be read."""


def _as_int(name: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer (got {value!r})") from None


def _get_int(name: str, fallback) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return _as_int(name, fallback)
    return _as_int(name, value.strip())


def _get_flag(name: str, fallback) -> bool:
    """Any value other than "false" keeps a category switched on."""
    value = os.getenv(name)
    if value is None:
        return bool(fallback)
    return value.strip().lower() != "false"


def load_config(settings_path: Optional[Path] = None) -> Config:
    """Load configuration from environment and settings.yaml."""
    project_root = Path(__file__).parent

    settings = _load_settings_file(settings_path or project_root / "settings.yaml")
    slack_settings = settings.get("slack") or {}
    display = settings.get("display") or {}

    defaults = BotConfig()

    slack_config = SlackConfig(
        webhook_url=os.getenv("SLACK_WEBHOOK_URL", ""),
        username=os.getenv("SLACK_USERNAME") or slack_settings.get("username") or DEFAULT_USERNAME,
        icon_emoji=os.getenv("SLACK_ICON_EMOJI") or slack_settings.get("icon_emoji") or DEFAULT_ICON_EMOJI,
        channel=os.getenv("SLACK_CHANNEL") or slack_settings.get("channel") or None
    )

    bot_config = BotConfig(
        max_anniversaries=_as_int("max_anniversaries", display.get("max_anniversaries", defaults.max_anniversaries)),
        max_events=_get_int("MAX_EVENTS", display.get("max_events", defaults.max_events)),
        max_births=_get_int("MAX_BIRTHS", display.get("max_births", defaults.max_births)),
        max_deaths=_get_int("MAX_DEATHS", display.get("max_deaths", defaults.max_deaths)),
        include_events=_get_flag("INCLUDE_EVENTS", display.get("include_events", True)),
        include_births=_get_flag("INCLUDE_BIRTHS", display.get("include_births", True)),
        include_deaths=_get_flag("INCLUDE_DEATHS", display.get("include_deaths", True))
    )

    # Timezone
    tz_name = os.getenv("TIMEZONE", settings.get("timezone", "Asia/Tokyo"))
    timezone = ZoneInfo(tz_name)

    # Run hour
    run_hour = _get_int("RUN_HOUR", settings.get("run_hour", 7))

    return Config(
        slack=slack_config,
        timezone=timezone,
        run_hour=run_hour,
        bot=bot_config,
        project_root=project_root
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not config.slack.webhook_url:
        errors.append("SLACK_WEBHOOK_URL is required")
    elif not config.slack.webhook_url.startswith(("http://", "https://")):
        errors.append("SLACK_WEBHOOK_URL must be an http(s) URL")

    if not 0 <= config.run_hour <= 23:
        errors.append(f"RUN_HOUR must be between 0 and 23 (got {config.run_hour})")

    for name in ("max_anniversaries", "max_events", "max_births", "max_deaths"):
        if getattr(config.bot, name) < 0:
            errors.append(f"{name} must not be negative")

    return errors
