"""
Japanese Wikipedia provider for the daily digest bot.
Fetches the "M月D日" page and extracts historical events, births and deaths
from its wiki markup.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import requests

from digest.models import BIRTH, DEATH, EVENT, DateKey, DatedRecord, YearValue
from utils.helpers import clean_wiki_text, get_session, safe_get

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15

WIKIPEDIA_API = "https://ja.wikipedia.org/w/api.php"

# Section headings as they appear on ja.wikipedia date pages
EVENTS_HEADINGS = ("できごと", "出来事")
BIRTHS_HEADINGS = ("誕生日", "誕生")
DEATHS_HEADINGS = ("忌日", "死去", "死没")
PERSONS_HEADINGS = ("人物",)

HEADING_RE = re.compile(r'^(?P<marks>={1,6})\s*(?P<title>.+?)\s*(?P=marks)\s*$')

# A whole [[...]] link, so commas and parentheses inside it stay inside it
LINK_SPAN = r'\[\[[^\]]*\]\]'

# "* [[1990年]]（平成2年） - " with the link, era aside and dash all optional
YEAR_PREFIX = (
    r'^\*\s*(?:\[\[)?(?P<bce>紀元前)?(?P<year>\d+)(?!\d)年?(?:\]\])?'
    r'(?:\s*[（(](?:' + LINK_SPAN + r'|[^（）()])*[）)])?'
    r'\s*-?\s*'
)
EVENT_LINE_RE = re.compile(YEAR_PREFIX + r'(?P<body>.+?)\.?\s*$')
# Persons: "name、role（+ 1961年）" for births, "（* 1899年）" for deaths
PERSON_LINE_RE = re.compile(
    YEAR_PREFIX
    + r'(?P<body>(?:' + LINK_SPAN + r'|\[(?!\[)|[^、,\[])+?)'
    + r'(?:[、,](?P<role>.+?))?\s*(?:[（(][+*]|$)'
)

LEFTOVER_MARKUP = ('[[', ']]', '{{', '}}')

NON_TEXT_MARKERS = ('image:', 'file:', 'ファイル:', '画像:', 'multiple image')

EVENT_MIN_LENGTH = 11
EVENT_MAX_LENGTH = 149
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 49


@dataclass
class WikiDayContent:
    """Records parsed from one date page."""
    events: List[DatedRecord] = field(default_factory=list)
    births: List[DatedRecord] = field(default_factory=list)
    deaths: List[DatedRecord] = field(default_factory=list)


def extract_section(content: str, titles: Sequence[str]) -> Optional[str]:
    """
    Return the body of the first section whose heading is one of `titles`.

    The body runs until the next heading of the same or a higher level.

    Args:
        content: Wiki markup
        titles: Accepted heading names

    Returns:
        Section body, or None if no such heading exists
    """
    lines = content.splitlines()
    start = None
    level = 0

    for index, line in enumerate(lines):
        match = HEADING_RE.match(line.strip())
        if not match:
            continue

        depth = len(match.group('marks'))
        if start is None:
            if match.group('title') in titles:
                start = index + 1
                level = depth
        elif depth <= level:
            return '\n'.join(lines[start:index])

    if start is None:
        return None
    return '\n'.join(lines[start:])


def _has_non_text_marker(*texts: str) -> bool:
    for text in texts:
        lowered = text.lower()
        if any(marker in lowered for marker in NON_TEXT_MARKERS):
            return True
    return False


def _has_markup(text: str) -> bool:
    return any(token in text for token in LEFTOVER_MARKUP)


def parse_event_line(line: str) -> Optional[DatedRecord]:
    """Parse one bullet of the events section; None if it doesn't qualify."""
    match = EVENT_LINE_RE.match(line)
    if not match:
        return None

    raw_body = match.group('body')
    body = clean_wiki_text(raw_body)

    if not body or _has_markup(body) or _has_non_text_marker(raw_body, body):
        return None
    if not EVENT_MIN_LENGTH <= len(body) <= EVENT_MAX_LENGTH:
        return None

    year = YearValue.parse(match.group('year'), bce=bool(match.group('bce')))
    return DatedRecord(year=year, label=f"{year.token}: {body}", category=EVENT)


def parse_person_line(line: str, category: str) -> Optional[DatedRecord]:
    """Parse one bullet of a births/deaths section; None if it doesn't qualify."""
    match = PERSON_LINE_RE.match(line)
    if not match:
        return None

    raw_body = match.group('body')
    name = clean_wiki_text(raw_body)

    if not name or _has_markup(name) or _has_non_text_marker(raw_body, name):
        return None
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        return None

    role = clean_wiki_text(match.group('role') or '') or None
    if role and _has_markup(role):
        return None
    label = f"{name}（{role}）" if role else name

    year = YearValue.parse(match.group('year'), bce=bool(match.group('bce')))
    return DatedRecord(year=year, label=label, role=role, category=category)


def _parse_lines(section: Optional[str], parse_line: Callable[[str], Optional[DatedRecord]]) -> List[DatedRecord]:
    if not section:
        return []

    records = []
    for line in section.splitlines():
        line = line.rstrip()
        if not line.startswith('*'):
            continue
        record = parse_line(line)
        if record is None:
            logger.debug(f"Skipped line: {line[:80]}")
            continue
        records.append(record)
    return records


def parse_events(content: str) -> List[DatedRecord]:
    """Historical events from the できごと section."""
    return _parse_lines(extract_section(content, EVENTS_HEADINGS), parse_event_line)


def parse_births(content: str) -> List[DatedRecord]:
    """Births from the 誕生日 section."""
    return _parse_lines(
        extract_section(content, BIRTHS_HEADINGS),
        lambda line: parse_person_line(line, BIRTH)
    )


def parse_deaths(content: str) -> List[DatedRecord]:
    """
    Deaths from the 忌日 section.

    The top level of that section also lists things like discontinued
    products, so only the 人物 sub-section is used when it exists.
    """
    section = extract_section(content, DEATHS_HEADINGS)
    if section is not None:
        persons = extract_section(section, PERSONS_HEADINGS)
        if persons is not None:
            section = persons

    return _parse_lines(section, lambda line: parse_person_line(line, DEATH))


def parse_wikipedia_content(content: str) -> WikiDayContent:
    """
    Extract every category from a date page.

    A category that fails to parse is logged and left empty.

    Args:
        content: Wiki markup of the page

    Returns:
        WikiDayContent with events, births and deaths
    """
    result = WikiDayContent()

    for name, parser in (('events', parse_events), ('births', parse_births), ('deaths', parse_deaths)):
        try:
            setattr(result, name, parser(content))
        except Exception as e:
            logger.error(f"Error parsing Wikipedia {name}: {e}")

    return result


def extract_revision_content(data: dict) -> Optional[str]:
    """
    Pull the page markup out of an action=query response.

    Handles the slots layout (rvslots=*), the legacy layout with the content
    directly on the revision, and formatversion=2 "content" keys.

    Args:
        data: Decoded JSON response

    Returns:
        Page markup or None if the page is missing
    """
    pages = safe_get(data, 'query', 'pages')
    if not pages:
        return None

    if isinstance(pages, list):
        page = pages[0]
    else:
        page_key = next(iter(pages))
        if page_key == '-1':
            return None
        page = pages[page_key]

    if page.get('missing') is not None:
        return None

    revision = safe_get(page, 'revisions', 0)
    if not revision:
        return None

    main_slot = safe_get(revision, 'slots', 'main')
    if main_slot:
        content = main_slot.get('*') or main_slot.get('content')
        if content:
            return content

    return revision.get('*') or revision.get('content')


def fetch_wikipedia_day(day: DateKey, session: Optional[requests.Session] = None) -> WikiDayContent:
    """
    Fetch and parse the Wikipedia page for a day.

    Network and decoding failures are logged and give empty content.

    Args:
        day: Day to fetch
        session: Requests session to use

    Returns:
        WikiDayContent for the day
    """
    session = session or get_session()
    title = day.display
    params = {
        'format': 'json',
        'action': 'query',
        'prop': 'revisions',
        'rvprop': 'content',
        'rvslots': '*',
        'titles': title,
    }

    try:
        response = session.get(WIKIPEDIA_API, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        logger.error(f"Error fetching Wikipedia page {title} from {WIKIPEDIA_API}: {e}")
        return WikiDayContent()
    except ValueError as e:
        logger.error(f"Error decoding Wikipedia response for {title}: {e}")
        return WikiDayContent()

    logger.info(f"Fetched Wikipedia data for {title}")

    content = extract_revision_content(data)
    if content is None:
        logger.warning(f"Wikipedia page not found or empty for {title}")
        return WikiDayContent()

    result = parse_wikipedia_content(content)
    logger.info(
        f"Parsed Wikipedia {title}: {len(result.events)} events, "
        f"{len(result.births)} births, {len(result.deaths)} deaths"
    )
    return result
