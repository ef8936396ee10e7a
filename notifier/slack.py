"""
Slack sender for the daily digest bot.
Posts messages through an incoming webhook.
"""

import logging
from typing import Optional

import requests

from config import SlackConfig

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class DeliveryError(Exception):
    """Raised when Slack doesn't accept a message."""


def build_payload(config: SlackConfig, text: str) -> dict:
    """Webhook JSON body for a message."""
    payload = {
        "text": text,
        "username": config.username,
        "icon_emoji": config.icon_emoji
    }
    if config.channel:
        payload["channel"] = config.channel
    return payload


def post_message(config: SlackConfig, text: str, session: Optional[requests.Session] = None) -> None:
    """
    Post a message to Slack.

    Args:
        config: Slack webhook settings
        text: Message text
        session: Requests session to use

    Raises:
        DeliveryError: if the webhook isn't configured, can't be reached,
            or answers with anything but 200
    """
    if not config.webhook_url:
        raise DeliveryError("SLACK_WEBHOOK_URL is not configured")

    poster = session or requests

    try:
        response = poster.post(
            config.webhook_url,
            json=build_payload(config, text),
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error(f"Slack request error: {e}")
        raise DeliveryError(f"Slack request failed: {e}") from e

    logger.info(f"Slack response: {response.status_code}")

    if response.status_code != 200:
        logger.error(f"Slack error: {response.status_code} - {response.text}")
        raise DeliveryError(f"Slack API error: {response.status_code} - {response.text}")
