"""
office_booking/services/events.py

Event emitter: pushes domain events to a Redis list for downstream consumers
(notifications, calendar sync).

Queue: events:p2p, one JSON object per event: {"type": ..., <payload>, "ts": ...}
Emission never fails the request; errors are logged and dropped.
"""

import json
import time
import logging

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)

EVENTS_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """Push one event to the events queue."""
    if not settings.events_enabled:
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(EVENTS_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {EVENTS_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
