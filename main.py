#!/usr/bin/env python3
"""
今日は何の日 Bot - Main Entry Point

Posts a daily "what happened today" digest to Slack with:
- Anniversaries and festivals (php.co.jp)
- Historical events, births and deaths (Japanese Wikipedia)
- The birth flower of the day (whatistoday.cyou)

Usage:
    python main.py                       # Run if it's the scheduled hour
    python main.py --force               # Run now regardless of the hour
    python main.py --dry-run             # Print the message instead of posting
    python main.py --date 03-05 --dry-run
    python main.py --check wikipedia     # Inspect one source without posting
"""

import argparse
import logging
import sys
from datetime import date, datetime
from typing import Optional

import requests

from config import Config, ConfigError, load_config, validate_config
from digest.builder import build_digest
from digest.formatter import format_error_message, format_message
from digest.models import DateKey
from notifier.slack import DeliveryError, post_message
from providers.anniversaries import anniversary_url, fetch_anniversary_html, parse_anniversaries
from providers.flower import fetch_birth_flower
from providers.wikipedia import fetch_wikipedia_day
from utils.helpers import HTML_COMMENT_RE, get_session, parse_target_date

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

CHECKS = ('anniversaries', 'wikipedia', 'flower')


def should_run_now(config: Config, force: bool = False, now: Optional[datetime] = None) -> tuple[bool, str]:
    """
    Check if the bot should run now.

    The scheduler calls us every hour; only the configured hour posts.

    Args:
        config: Application configuration
        force: If True, ignore the time check
        now: Current time (defaults to now in the configured timezone)

    Returns:
        Tuple of (should_run, reason)
    """
    if force:
        return True, "Force flag set"

    now = now or datetime.now(config.timezone)
    if now.hour != config.run_hour:
        return False, f"Not scheduled hour (current: {now.hour}, scheduled: {config.run_hour})"

    return True, "Scheduled hour"


def run_bot(
    config: Config,
    target_date: date,
    dry_run: bool = False,
    session: Optional[requests.Session] = None
) -> tuple[bool, str]:
    """
    Build the digest for a day and post it.

    Any failure is logged and reported to Slack with a short notice. If
    that notice can't be delivered either, it is only logged.

    Args:
        config: Application configuration
        target_date: Day to post about
        dry_run: If True, print the message instead of posting
        session: Requests session shared by fetches and the post

    Returns:
        Tuple of (success, message)
    """
    session = session or get_session()
    day = DateKey.from_date(target_date)

    logger.info(f'Starting "今日は何の日" bot for {day.display}...')

    try:
        digest = build_digest(day, config.bot, session=session)
        message = format_message(digest, config.bot)
        logger.info(f"Formatted message:\n{message}")

        if dry_run:
            print(message)
            return True, "Dry run complete, nothing posted"

        post_message(config.slack, message, session=session)
        logger.info("Successfully posted to Slack")
        return True, f"Digest for {day.display} posted"

    except Exception as e:
        if isinstance(e, DeliveryError):
            logger.error(f"Error posting to Slack: {e}")
        else:
            logger.exception(f"Error in main execution: {e}")

        if not dry_run:
            try:
                post_message(config.slack, format_error_message(e), session=session)
            except Exception as slack_error:
                logger.error(f"Error posting error message to Slack: {slack_error}")

        return False, f"Run failed: {e}"


def run_check(name: str, target_date: date, session: Optional[requests.Session] = None) -> bool:
    """
    Fetch a single source and log what was extracted. Nothing is posted.

    Args:
        name: One of CHECKS
        target_date: Day to check
        session: Requests session to use

    Returns:
        True if the source produced something
    """
    session = session or get_session()
    day = DateKey.from_date(target_date)

    if name == 'anniversaries':
        url = anniversary_url(day)
        try:
            html_content = fetch_anniversary_html(day, session=session)
        except requests.RequestException as e:
            logger.error(f"Could not fetch {url}: {e}")
            return False

        logger.info(f"URL: {url}")
        logger.info(f"HTML content length: {len(html_content)}")
        logger.info(f"HTML comments found: {len(HTML_COMMENT_RE.findall(html_content))}")

        records = parse_anniversaries(html_content, day.display)
        for index, record in enumerate(records, 1):
            logger.info(f"  {index}. {record}")
        return bool(records)

    if name == 'wikipedia':
        wiki = fetch_wikipedia_day(day, session=session)
        for label, records in (('Historical events', wiki.events), ('Births', wiki.births), ('Deaths', wiki.deaths)):
            logger.info(f"{label} found: {len(records)}")
            for index, record in enumerate(records[:3], 1):
                logger.info(f"  {index}. {record}")
        return bool(wiki.events or wiki.births or wiki.deaths)

    if name == 'flower':
        flower = fetch_birth_flower(day, session=session)
        if flower:
            logger.info(f"Birth flower: {flower}")
            return True
        logger.warning("Failed to fetch birth flower")
        return False

    raise ValueError(f"Unknown check: {name}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Post the 今日は何の日 digest to Slack"
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help="Print the message instead of posting it"
    )
    parser.add_argument(
        '--force',
        action='store_true',
        help="Ignore the scheduled hour"
    )
    parser.add_argument(
        '--date',
        help="Day to post about, e.g. 03-05 or 2026-03-05 (default: today)"
    )
    parser.add_argument(
        '--check',
        choices=CHECKS,
        help="Fetch one source and log the result without posting"
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load configuration
    logger.info("Loading configuration...")
    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Configuration errors:")
        logger.error(f"  - {e}")
        sys.exit(1)

    if args.date:
        target_date = parse_target_date(args.date, config.timezone)
        if target_date is None:
            logger.error(f"Could not parse date: {args.date}")
            sys.exit(2)
    else:
        target_date = datetime.now(config.timezone).date()

    if args.check:
        sys.exit(0 if run_check(args.check, target_date) else 1)

    # Validate configuration
    validation_errors = validate_config(config)
    if validation_errors:
        log = logger.warning if args.dry_run else logger.error
        log("Configuration errors:")
        for error in validation_errors:
            log(f"  - {error}")
        if not args.dry_run:
            sys.exit(1)

    # Check if we should run
    if not args.dry_run and not args.date:
        should_run, reason = should_run_now(config, args.force)
        if not should_run:
            logger.info(f"Not running: {reason}")
            sys.exit(0)

    success, message = run_bot(config, target_date, dry_run=args.dry_run)

    if success:
        logger.info(message)
        sys.exit(0)
    else:
        logger.error(message)
        sys.exit(1)


if __name__ == '__main__':
    main()
