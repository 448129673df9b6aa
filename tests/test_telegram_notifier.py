"""
Tests for the Telegram reminder delivery.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest

from telegram_bot.notifier import check_and_send_alert, format_alert, send_alert
from waste_reminder.models import Alert

ALERT = Alert(
    title="Mülltonnen rausstellen",
    types=("general-waste", "organic"),
    labels=("Restmüll", "Bio"),
    scheduled_at=datetime(2024, 3, 14, 20, 0, tzinfo=ZoneInfo("Europe/Berlin")),
)


@pytest.fixture
def mock_bot():
    """Returns a mock Telegram bot."""
    bot = MagicMock()
    bot.send_message = AsyncMock()
    return bot


@pytest.fixture
def mock_presentation():
    presentation = MagicMock()
    presentation.ready = True
    presentation.evaluate.return_value = ([], ALERT)
    return presentation


def test_format_alert():
    assert format_alert(ALERT) == "🗑️ Mülltonnen rausstellen\nRestmüll, Bio - 20:00"


@pytest.mark.asyncio
async def test_check_and_send_alert_sends_due_alert(mock_presentation, mock_bot):
    sent = await check_and_send_alert(mock_presentation, mock_bot, 123)

    assert sent is True
    mock_bot.send_message.assert_awaited_once_with(chat_id=123, text=format_alert(ALERT))


@pytest.mark.asyncio
async def test_check_and_send_alert_nothing_due(mock_presentation, mock_bot):
    mock_presentation.evaluate.return_value = ([], None)

    sent = await check_and_send_alert(mock_presentation, mock_bot, 123)

    assert sent is False
    mock_bot.send_message.assert_not_called()


@pytest.mark.asyncio
async def test_check_and_send_alert_waits_for_first_snapshot(mock_presentation, mock_bot):
    mock_presentation.ready = False

    sent = await check_and_send_alert(mock_presentation, mock_bot, 123)

    assert sent is False
    mock_presentation.evaluate.assert_not_called()


@pytest.mark.asyncio
async def test_send_alert_handles_failure(mock_bot):
    mock_bot.send_message.side_effect = Exception("Test error")

    assert await send_alert(mock_bot, 123, ALERT) is False
