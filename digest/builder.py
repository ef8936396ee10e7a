"""
Collects every source for a day into a single TodayDigest.
"""

import logging
import random
from typing import Optional

import requests

from config import BotConfig
from digest.models import DateKey, TodayDigest
from providers.anniversaries import fetch_anniversaries
from providers.flower import fetch_birth_flower
from providers.wikipedia import WikiDayContent, fetch_wikipedia_day
from utils.helpers import get_session
from utils.sampling import random_items, sort_by_year

logger = logging.getLogger(__name__)


def build_digest(
    day: DateKey,
    bot_config: Optional[BotConfig] = None,
    session: Optional[requests.Session] = None,
    rng: Optional[random.Random] = None
) -> TodayDigest:
    """
    Fetch and combine everything for one day.

    Anniversaries are the primary source: if they can't be fetched the
    exception propagates and no digest is built. Wikipedia and the birth
    flower only degrade to empty on failure.

    Wikipedia categories are sampled first and then put in chronological
    order, so each run shows a different but ordered selection.

    Args:
        day: Day to build the digest for
        bot_config: Per-category limits and switches
        session: Requests session shared by all fetches
        rng: Random source for sampling

    Returns:
        TodayDigest for the day
    """
    bot_config = bot_config or BotConfig()
    session = session or get_session()

    logger.info(f"Building digest for {day.display}")

    # 1. Anniversaries (primary)
    logger.info("Fetching anniversaries...")
    anniversaries = fetch_anniversaries(day, session=session)
    logger.info(f"Found {len(anniversaries)} anniversaries")

    # 2. Wikipedia events, births and deaths
    logger.info("Fetching Wikipedia...")
    try:
        wiki = fetch_wikipedia_day(day, session=session)
    except Exception as e:
        logger.error(f"Error fetching Wikipedia for {day.display}: {e}")
        wiki = WikiDayContent()

    historical_events = []
    if bot_config.include_events:
        historical_events = sort_by_year(random_items(wiki.events, bot_config.max_events, rng))

    notable_births = []
    if bot_config.include_births:
        notable_births = sort_by_year(random_items(wiki.births, bot_config.max_births, rng))

    notable_deaths = []
    if bot_config.include_deaths:
        notable_deaths = sort_by_year(random_items(wiki.deaths, bot_config.max_deaths, rng))

    logger.info(
        f"Selected {len(historical_events)}/{len(wiki.events)} events, "
        f"{len(notable_births)}/{len(wiki.births)} births, "
        f"{len(notable_deaths)}/{len(wiki.deaths)} deaths"
    )

    # 3. Birth flower
    logger.info("Fetching birth flower...")
    try:
        flower = fetch_birth_flower(day, session=session)
    except Exception as e:
        logger.error(f"Error fetching birth flower for {day.display}: {e}")
        flower = None

    return TodayDigest(
        date=day.display,
        anniversaries=tuple(anniversaries),
        historical_events=tuple(historical_events),
        notable_births=tuple(notable_births),
        notable_deaths=tuple(notable_deaths),
        flower=flower
    )
