"""
Renders a TodayDigest into the Slack message text.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from config import BotConfig
from digest.models import TodayDigest

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
MESSAGE_TEMPLATE = "message.txt.j2"

FOOTER = "_Powered by php.co.jp, Wikipedia & whatistoday.cyou_"
ERROR_PREFIX = "❗ 今日は何の日Botでエラーが発生しました"

ANNIVERSARIES_TITLE = "🎉 *記念日・行事・お祭り*"
EVENTS_TITLE = "🏛️ *歴史上の出来事*"
BIRTHS_TITLE = "🎂 *今日の誕生日*"
DEATHS_TITLE = "🕯️ *今日の忌日*"
FLOWER_TITLE = "🌸 *誕生花*"


@dataclass
class Section:
    """One titled bullet list of the message."""
    title: str
    entries: List[str]


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True
    )


def _section(title: str, records: Sequence, limit: int) -> Optional[Section]:
    entries = [str(record) for record in records[:limit]]
    if not entries:
        return None
    return Section(title=title, entries=entries)


def build_sections(digest: TodayDigest, bot_config: Optional[BotConfig] = None) -> List[Section]:
    """
    Turn the digest into ordered, capped sections.

    Empty categories produce no section at all.
    """
    bot_config = bot_config or BotConfig()

    candidates = [
        _section(ANNIVERSARIES_TITLE, digest.anniversaries, bot_config.max_anniversaries),
        _section(EVENTS_TITLE, digest.historical_events, bot_config.max_events),
        _section(BIRTHS_TITLE, digest.notable_births, bot_config.max_births),
        _section(DEATHS_TITLE, digest.notable_deaths, bot_config.max_deaths),
    ]
    if digest.flower and digest.flower.name.strip():
        candidates.append(Section(title=FLOWER_TITLE, entries=[digest.flower.name]))

    return [section for section in candidates if section is not None]


def format_message(digest: TodayDigest, bot_config: Optional[BotConfig] = None) -> str:
    """
    Render the digest as Slack mrkdwn text.

    Args:
        digest: Collected records for the day
        bot_config: Display limits per category

    Returns:
        Message text
    """
    sections = build_sections(digest, bot_config)
    template = _environment().get_template(MESSAGE_TEMPLATE)

    message = template.render(date=digest.date, sections=sections, footer=FOOTER)
    logger.debug(f"Rendered message with {len(sections)} sections")
    return message


def format_error_message(error) -> str:
    """Short notice posted when a run fails."""
    return f"{ERROR_PREFIX}: {error}"
