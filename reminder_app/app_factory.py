"""
This module provides a factory for creating and configuring the application's core components.
"""
from typing import Optional, Tuple

from waste_reminder.channel import SnapshotChannel
from waste_reminder.config import (LOG_DB_PATH, LOG_LEVEL, WASTE_REMINDER_CONFIG,
                                   WASTE_REMINDER_ROOT, ReminderConfig, load_config)
from waste_reminder.facade import WasteReminderFacade
from waste_reminder.services.presentation_service import PresentationService

from .logging_config import setup_logging


def initialize_app() -> None:
    """
    Initializes the application by setting up logging.
    """
    setup_logging(LOG_LEVEL, LOG_DB_PATH)


def create_components(
    config: Optional[ReminderConfig] = None,
    config_path: str = WASTE_REMINDER_CONFIG,
    root: str = WASTE_REMINDER_ROOT,
) -> Tuple[WasteReminderFacade, PresentationService]:
    """
    Wires the aggregation facade and the presentation service to one
    snapshot channel. The facade is configured but no cycle is started.
    """
    if config is None:
        config = load_config(config_path)

    channel = SnapshotChannel()
    presentation = PresentationService(config, channel)
    facade = WasteReminderFacade(channel=channel, root=root)
    facade.configure(config, refresh=False)
    return facade, presentation
