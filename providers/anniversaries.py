"""
Anniversaries provider for the daily digest bot.
Scrapes 記念日・行事・お祭り from PHP研究所's "今日は何の日" page.
"""

import logging
import re
from typing import List, Optional

import requests

from digest.models import AnniversaryRecord, DateKey
from utils.helpers import collapse_whitespace, get_session, strip_html_text

logger = logging.getLogger(__name__)

PHP_TODAY_URL = "https://www.php.co.jp/fun/today/{date}.php"

REQUEST_TIMEOUT = 15

# Items follow the first "●" after the heading and run until the next section
ANNIVERSARY_SECTION_RE = re.compile(
    r'記念日・行事・お祭り.*?●(?P<items>.*?)(?=歴史上の出来事|今日の誕生日|\Z)',
    re.DOTALL
)
# e.g. "●帽子の日（ハットの日）（協同組合東京帽子協会）,●健康ハートの日"
ITEM_SEPARATOR_RE = re.compile(r'[,●]')

MAX_ITEM_LENGTH = 99


def anniversary_url(day: DateKey) -> str:
    """Page URL for a day."""
    return PHP_TODAY_URL.format(date=day.numeric)


def parse_anniversaries(html_content: str, display_date: Optional[str] = None) -> List[AnniversaryRecord]:
    """
    Extract the anniversary list from a php.co.jp day page.

    The page is already scoped to one day by its URL, so `display_date` is
    only used for logging.

    Args:
        html_content: Raw HTML of the page
        display_date: Day being parsed, e.g. "5月1日"

    Returns:
        List of AnniversaryRecord; empty if the section is missing
    """
    records = []

    try:
        text = strip_html_text(html_content)

        match = ANNIVERSARY_SECTION_RE.search(text)
        if not match:
            logger.warning(f"Anniversary section not found for {display_date}")
            return []

        for item in ITEM_SEPARATOR_RE.split(match.group('items')):
            item = collapse_whitespace(item)
            if item and len(item) <= MAX_ITEM_LENGTH:
                records.append(AnniversaryRecord(label=item))

    except Exception as e:
        logger.error(f"Error parsing anniversary HTML for {display_date}: {e}")
        return []

    logger.info(f"Parsed {len(records)} anniversaries for {display_date}")
    return records


def fetch_anniversary_html(day: DateKey, session: Optional[requests.Session] = None) -> str:
    """
    Download the php.co.jp page for a day.

    Raises:
        requests.RequestException: if the page can't be fetched
    """
    session = session or get_session()
    url = anniversary_url(day)

    response = session.get(url, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()

    # The page declares its charset in a meta tag rather than the header
    if response.encoding is None or response.encoding.lower() == 'iso-8859-1':
        response.encoding = response.apparent_encoding

    logger.info(f"Fetched anniversary data from: {url}")
    return response.text


def fetch_anniversaries(day: DateKey, session: Optional[requests.Session] = None) -> List[AnniversaryRecord]:
    """
    Fetch anniversaries for a day.

    This is the primary source: fetch errors propagate to the caller
    instead of degrading to an empty list.

    Args:
        day: Day to fetch
        session: Requests session to use

    Returns:
        List of AnniversaryRecord
    """
    html_content = fetch_anniversary_html(day, session=session)
    return parse_anniversaries(html_content, day.display)
