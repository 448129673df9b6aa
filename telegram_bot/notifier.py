"""
This module delivers reminder alerts to a Telegram chat.
"""

import asyncio
import logging

from telegram import Bot

from waste_reminder.models import Alert
from waste_reminder.services.presentation_service import PresentationService

logger = logging.getLogger(__name__)

# Seconds between reminder checks
ALERT_CHECK_INTERVAL_SECONDS = 3600


def format_alert(alert: Alert) -> str:
    """Renders an alert as a Telegram message."""
    return f"🗑️ {alert.title}\n{alert.message}"


async def send_alert(bot: Bot, chat_id: int, alert: Alert) -> bool:
    """Sends a single alert. Returns False and logs if sending failed."""
    try:
        await bot.send_message(chat_id=chat_id, text=format_alert(alert))
    except Exception as e:
        logger.error(f"Failed to send reminder to chat_id {chat_id}: {e}")
        return False
    logger.info(f"Successfully sent reminder to chat_id {chat_id}.")
    return True


async def check_and_send_alert(presentation: PresentationService, bot: Bot, chat_id: int) -> bool:
    """
    Evaluates the latest snapshot and sends the alert if one is due.
    """
    if not presentation.ready:
        logger.info("No waste schedule received yet; skipping reminder check.")
        return False

    _, alert = presentation.evaluate()
    if alert is None:
        logger.info("No reminder is due.")
        return False
    return await send_alert(bot, chat_id, alert)


async def alert_loop(
    presentation: PresentationService,
    bot: Bot,
    chat_id: int,
    interval: float = ALERT_CHECK_INTERVAL_SECONDS,
) -> None:
    """
    The loop that periodically checks for and sends reminder alerts.
    """
    logger.info("Reminder alert loop started.")
    while True:
        try:
            await check_and_send_alert(presentation, bot, chat_id)
        except Exception as e:
            logger.exception(f"An error occurred in the reminder alert loop: {e}")
        await asyncio.sleep(interval)
