"""
Utility functions for the daily digest bot.
Includes wiki markup cleaning, HTML stripping, date parsing, and HTTP/dict helpers.
"""

import re
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import requests
from dateutil import parser as dateutil_parser
from bs4 import BeautifulSoup


# User agent for requests
USER_AGENT = (
    "Mozilla/5.0 (compatible; KyouBot/1.0; "
    "+https://github.com/kyou-wa-nanno-hi/today-digest)"
)

# Wiki markup patterns, applied in this order by clean_wiki_text
PIPED_LINK_RE = re.compile(r'\[\[([^\[\]|]+)\|([^\[\]]+)\]\]')
BARE_LINK_RE = re.compile(r'\[\[([^\[\]|]+)\]\]')
TEMPLATE_RE = re.compile(r'\{\{[^{}]*\}\}')
REF_RE = re.compile(r'<ref[^>]*/>|<ref[^>]*>.*?</ref>', re.DOTALL | re.IGNORECASE)
TAG_RE = re.compile(r'<[^>]+>')
CONTINUATION_ASIDE_RE = re.compile(r'[（(][^（）()]*[*+][^（）()]*[）)]')
EMPHASIS_RE = re.compile(r"'{2,}")
EDGE_RE = re.compile(r'^[\s\-]+|[\s\-]+$')

# HTML comments: well-formed, then a dangling opener that swallows the rest
HTML_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
UNTERMINATED_COMMENT_RE = re.compile(r'<!--.*', re.DOTALL)

WHITESPACE_RE = re.compile(r'\s+')


def _sub_until_stable(pattern: re.Pattern, repl: str, text: str) -> str:
    """Apply a substitution repeatedly so nested constructs collapse from the inside out."""
    while True:
        replaced = pattern.sub(repl, text)
        if replaced == text:
            return replaced
        text = replaced


def clean_wiki_text(text: str) -> str:
    """
    Turn a fragment of wiki markup into plain display text.

    Removes, in order:
    - piped links [[target|display]] (keeps display)
    - bare links [[target]] (keeps target)
    - templates {{...}}
    - <ref> citations, HTML comments and any remaining tags
    - parenthesized asides carrying a "*" or "+" continuation marker
    - bold/italic quote runs
    - leading/trailing whitespace and hyphens

    Markup that doesn't match a pattern is left as it is.

    Args:
        text: Raw wiki fragment

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    # Links can nest (file captions), so resolve both kinds until nothing changes
    while True:
        resolved = BARE_LINK_RE.sub(r'\1', PIPED_LINK_RE.sub(r'\2', text))
        if resolved == text:
            break
        text = resolved

    text = _sub_until_stable(TEMPLATE_RE, '', text)
    text = REF_RE.sub('', text)
    text = HTML_COMMENT_RE.sub('', text)
    text = TAG_RE.sub('', text)
    text = CONTINUATION_ASIDE_RE.sub('', text)
    text = EMPHASIS_RE.sub('', text)
    text = EDGE_RE.sub('', text)

    return text.strip()


def strip_html_text(html_content: str) -> str:
    """
    Reduce an HTML page to its text.

    Comments are dropped first, including one that is never closed
    (everything after its opener goes) and stray closers.

    Args:
        html_content: HTML markup

    Returns:
        Plain text with entities decoded
    """
    if not html_content:
        return ""

    text = HTML_COMMENT_RE.sub('', html_content)
    text = UNTERMINATED_COMMENT_RE.sub('', text)
    text = text.replace('-->', '')

    soup = BeautifulSoup(text, 'html.parser')

    # Remove style and script tags
    for tag in soup.find_all(['style', 'script']):
        tag.decompose()

    plain_text = soup.get_text()

    # &nbsp; decodes to a non-breaking space
    plain_text = plain_text.replace('\xa0', ' ')

    return plain_text.strip()


def collapse_whitespace(text: str) -> str:
    """Squash whitespace runs into single spaces and trim."""
    if not text:
        return ""
    return WHITESPACE_RE.sub(' ', text).strip()


def parse_target_date(value: str, tz: ZoneInfo = ZoneInfo("Asia/Tokyo")) -> Optional[date]:
    """
    Parse a user-supplied date such as "03-05", "2026-03-05" or "March 5".

    Missing parts default to today in the given timezone.

    Args:
        value: Date string to parse
        tz: Timezone used for the defaults

    Returns:
        Parsed date or None if parsing fails
    """
    if not value:
        return None

    today = datetime.now(tz)
    default = datetime(today.year, today.month, today.day)

    try:
        return dateutil_parser.parse(value, default=default).date()
    except (ValueError, OverflowError):
        return None


def safe_get(data: dict, *keys, default=None):
    """
    Safely get nested dictionary values.

    Args:
        data: Dictionary to traverse
        *keys: Keys to access
        default: Default value if key not found

    Returns:
        Value at the nested key or default
    """
    result = data
    for key in keys:
        try:
            result = result[key]
        except (KeyError, TypeError, IndexError):
            return default
    return result


def get_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Create a requests session with the bot's User-Agent."""
    session = requests.Session()
    session.headers.update({'User-Agent': user_agent})
    return session
