"""
Birth flower provider for the daily digest bot.
Looks up the flower of the day from the whatistoday.cyou API.
"""

import logging
from typing import Optional

import requests

from digest.models import DateKey, FlowerFact
from utils.helpers import get_session

logger = logging.getLogger(__name__)

BIRTH_FLOWER_API = "https://api.whatistoday.cyou/v3/birthflower/{date}"

REQUEST_TIMEOUT = 15


def fetch_birth_flower(day: DateKey, session: Optional[requests.Session] = None) -> Optional[FlowerFact]:
    """
    Fetch the birth flower for a day.

    Args:
        day: Day to look up
        session: Requests session to use

    Returns:
        FlowerFact, or None if the API has no entry or can't be reached
    """
    session = session or get_session()
    url = BIRTH_FLOWER_API.format(date=day.compact)

    try:
        response = session.get(url, headers={'Accept': 'application/json'}, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        logger.error(f"Error fetching birth flower from {url}: {e}")
        return None
    except ValueError as e:
        logger.error(f"Error decoding birth flower response from {url}: {e}")
        return None

    logger.info(f"Fetched birth flower data from: {url}")

    name = data.get('flower') if isinstance(data, dict) else None
    name = str(name).strip() if name is not None else ''
    if not name:
        logger.warning(f"No birth flower listed for {day.display}")
        return None

    return FlowerFact(name=name)
