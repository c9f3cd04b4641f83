"""Handling of verified call lifecycle notifications."""

import logging

from clinic_agent.config.constants import LOGGER_NAME
from clinic_agent.models.message_schemas import LifecycleEvent

logger = logging.getLogger(LOGGER_NAME)


async def handle_lifecycle_event(event: LifecycleEvent) -> None:
    """
    Record a lifecycle notification.

    Args:
        event: A notification whose signature has already been verified
    """
    if event.event == "call_started":
        logger.info(f"Call started: {event.call_id}")
    elif event.event == "call_ended":
        logger.info(f"Call ended: {event.call_id}")
    elif event.event == "call_analyzed":
        logger.info(f"Call analyzed: {event.call_id}")
    else:
        logger.info(f"Unknown lifecycle event {event.event} for call: {event.call_id}")
