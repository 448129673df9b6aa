"""
This module is the command-line entry point for the waste reminder.
"""
import argparse
import asyncio
import logging
import threading

from waste_reminder.config import (DASHBOARD_PORT, TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID,
                                   WASTE_REMINDER_CONFIG)
from waste_reminder.exceptions import ConfigError

from .app_factory import create_components, initialize_app

logger = logging.getLogger(__name__)


def print_pickups(presentation) -> None:
    rows, alert = presentation.evaluate()
    if not rows:
        print("No upcoming pickups.")
    for row in rows:
        print(f"{row.day.strftime('%a %d.%m.')}  {', '.join(row.labels):<30} {row.due_state.label}")
    if alert:
        print(f"\n{alert.title}: {alert.message}")


async def run_with_alerts(facade, presentation) -> None:
    """Runs the refresh loop and, when Telegram is configured, the alert loop."""
    tasks = [facade.run()]
    if TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID:
        from telegram import Bot

        from telegram_bot.notifier import alert_loop

        bot = Bot(TELEGRAM_BOT_TOKEN)
        tasks.append(alert_loop(presentation, bot, int(TELEGRAM_CHAT_ID)))
    else:
        logger.warning("TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID not set; alerts are only logged.")
        presentation.add_alert_sink(lambda alert: logger.info(f"ALERT {alert.title}: {alert.message}"))

    try:
        await asyncio.gather(*tasks)
    except asyncio.CancelledError:
        logger.info("Stopping...")
    finally:
        facade.stop()


def main():
    initialize_app()
    parser = argparse.ArgumentParser(description="Waste reminder runner.")
    parser.add_argument(
        "command",
        choices=["once", "run", "dashboard"],
        help="The command to execute.",
    )
    parser.add_argument(
        "--config",
        default=WASTE_REMINDER_CONFIG,
        help="Path to the JSON schedule configuration.",
    )
    args = parser.parse_args()

    try:
        facade, presentation = create_components(config_path=args.config)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        raise SystemExit(1)

    if args.command == "once":
        facade.refresh()
        print_pickups(presentation)
    elif args.command == "run":
        logger.info("Starting refresh loop...")
        asyncio.run(run_with_alerts(facade, presentation))
    elif args.command == "dashboard":
        from dashboard.app import run_dashboard

        worker = threading.Thread(
            target=lambda: asyncio.run(facade.run()), name="waste-refresh", daemon=True
        )
        worker.start()
        logger.info("Starting dashboard...")
        try:
            run_dashboard(presentation, port=DASHBOARD_PORT)
        finally:
            facade.stop()


if __name__ == "__main__":
    main()
