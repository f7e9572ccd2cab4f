"""Route parsed SSE frames to text, completion, or error actions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from .sse import DONE_SENTINEL
from .types import Frame

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Upstream event vocabulary
# ---------------------------------------------------------------------------

OUTPUT_TEXT_DELTA = "response.output_text.delta"
CONTENT_PART_DELTA = "response.content_part.delta"
OUTPUT_TEXT_DONE = "response.output_text.done"
RESPONSE_COMPLETED = "response.completed"
RESPONSE_ERROR = "response.error"
RESPONSE_FAILED = "response.failed"
ERROR = "error"

TEXT_EVENTS = frozenset({OUTPUT_TEXT_DELTA, CONTENT_PART_DELTA})
COMPLETION_EVENTS = frozenset({OUTPUT_TEXT_DONE, RESPONSE_COMPLETED})
ERROR_EVENTS = frozenset({RESPONSE_ERROR, RESPONSE_FAILED, ERROR})

DEFAULT_ERROR_MESSAGE = "Stream error"

STRUCTURED_DELTA_TYPE = "output_text.delta"

# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AppendText:
    text: str


@dataclass(frozen=True)
class Complete:
    pass


@dataclass(frozen=True)
class Fail:
    message: str
    event: str | None = None


@dataclass(frozen=True)
class Ignore:
    pass


Action = AppendText | Complete | Fail | Ignore

COMPLETE = Complete()
IGNORE = Ignore()


def dispatch(frame: Frame) -> Action:
    """Decide what one frame means for the stream.

    Unknown event names are ignored rather than rejected, since the upstream
    vocabulary grows over time. Payloads that are not JSON are ignored too.
    """
    if not frame.data:
        return IGNORE
    if frame.data == DONE_SENTINEL:
        return COMPLETE

    try:
        payload = json.loads(frame.data)
    except json.JSONDecodeError:
        logger.debug("Ignoring non-JSON payload for event %r", frame.event)
        return IGNORE

    if frame.event in TEXT_EVENTS:
        text = _delta_text(payload)
        if not text:
            return IGNORE
        return AppendText(text)
    if frame.event in COMPLETION_EVENTS:
        return COMPLETE
    if frame.event in ERROR_EVENTS:
        return Fail(_error_message(payload), event=frame.event)

    logger.debug("Ignoring event %r", frame.event)
    return IGNORE


def _delta_text(payload: Any) -> str | None:
    """Pull the text fragment out of a delta payload.

    Two shapes are recognised::

        {"delta": "text"}
        {"delta": {"type": "output_text.delta", "text": "text"}}
    """
    if not isinstance(payload, dict):
        return None
    delta = payload.get("delta")
    if isinstance(delta, str):
        return delta
    if (
        isinstance(delta, dict)
        and delta.get("type") == STRUCTURED_DELTA_TYPE
        and isinstance(delta.get("text"), str)
    ):
        return delta["text"]
    return None


def _error_message(payload: Any) -> str:
    if not isinstance(payload, dict):
        return DEFAULT_ERROR_MESSAGE
    candidates = [payload.get("error"), payload]
    response = payload.get("response")
    if isinstance(response, dict):
        candidates.insert(0, response.get("error"))
    for source in candidates:
        if isinstance(source, dict):
            message = source.get("message")
            if isinstance(message, str) and message:
                return message
    return DEFAULT_ERROR_MESSAGE
