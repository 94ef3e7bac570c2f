"""Domain event constants and publisher.

Defines event type constants and a simple publish() callable used by the
answer save, completion and question delete flows.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List
import logging

logger = logging.getLogger(__name__)

ANSWER_SAVED = "answer.saved"
RESPONSE_COMPLETED = "response.completed"
QUESTION_DELETED = "question.deleted"

EVENT_BUFFER_LIMIT = 1000


def publish(event_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Publish a domain event.

    Events are logged and kept in an in-process buffer; the published
    envelope is returned so routes can echo it in their response.
    """
    event = {"type": event_type, "payload": payload}
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append(event)
    return event


# Most recent events only; older ones fall off once the limit is reached
EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=EVENT_BUFFER_LIMIT)


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events, oldest first; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "ANSWER_SAVED",
    "RESPONSE_COMPLETED",
    "QUESTION_DELETED",
    "EVENT_BUFFER_LIMIT",
    "publish",
    "get_buffered_events",
]
