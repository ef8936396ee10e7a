"""
Tests for the Slack webhook sender and the birth flower provider.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import make_response
from config import SlackConfig
from digest.models import DateKey, FlowerFact
from notifier.slack import DeliveryError, build_payload, post_message
from providers.flower import fetch_birth_flower

WEBHOOK = "https://hooks.slack.com/services/T000/B000/XXXX"


class TestPostMessage:
    """Tests for post_message."""

    def test_payload(self):
        """Test the JSON body sent to Slack."""
        config = SlackConfig(webhook_url=WEBHOOK)
        session = MagicMock()
        session.post.return_value = make_response(status_code=200, text="ok")

        post_message(config, "こんにちは", session=session)

        args, kwargs = session.post.call_args
        assert args[0] == WEBHOOK
        assert kwargs['json'] == {
            "text": "こんにちは",
            "username": "今日は何の日Bot",
            "icon_emoji": ":calendar:"
        }

    def test_channel_included_when_set(self):
        """Test that a configured channel is sent."""
        config = SlackConfig(webhook_url=WEBHOOK, channel="#general")
        assert build_payload(config, "x")["channel"] == "#general"

    def test_non_200_raises(self):
        """Test that Slack errors surface as DeliveryError."""
        session = MagicMock()
        session.post.return_value = make_response(status_code=404, text="no_service")

        with pytest.raises(DeliveryError, match="no_service"):
            post_message(SlackConfig(webhook_url=WEBHOOK), "x", session=session)

    def test_request_error_raises(self):
        """Test that transport errors surface as DeliveryError."""
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")

        with pytest.raises(DeliveryError):
            post_message(SlackConfig(webhook_url=WEBHOOK), "x", session=session)

    def test_missing_webhook_raises(self):
        """Test that nothing is sent without a webhook URL."""
        session = MagicMock()

        with pytest.raises(DeliveryError):
            post_message(SlackConfig(webhook_url=""), "x", session=session)
        session.post.assert_not_called()


class TestFetchBirthFlower:
    """Tests for fetch_birth_flower."""

    def test_flower_found(self):
        """Test a normal lookup."""
        session = MagicMock()
        session.get.return_value = make_response(json_data={"date": "0501", "flower": "スズラン"})

        assert fetch_birth_flower(DateKey(5, 1), session=session) == FlowerFact("スズラン")
        assert session.get.call_args[0][0] == "https://api.whatistoday.cyou/v3/birthflower/0501"

    def test_flower_missing(self):
        """Test that a response without a flower gives None."""
        session = MagicMock()
        session.get.return_value = make_response(json_data={"date": "0501"})

        assert fetch_birth_flower(DateKey(5, 1), session=session) is None

    def test_blank_flower(self):
        """Test that a whitespace-only flower gives None."""
        session = MagicMock()
        session.get.return_value = make_response(json_data={"date": "0501", "flower": "  　 "})

        assert fetch_birth_flower(DateKey(5, 1), session=session) is None

    def test_fetch_error(self):
        """Test that a network error gives None."""
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")

        assert fetch_birth_flower(DateKey(5, 1), session=session) is None
