"""Server-sent-event framing: split decoded text into frames and parse fields."""

from __future__ import annotations

import re

from .types import Frame

DONE_SENTINEL = "[DONE]"

_FRAME_DELIMITER = re.compile(r"\r?\n\r?\n")
_LINE_DELIMITER = re.compile(r"\r?\n")


class FrameSplitter:
    """Split a text stream into complete SSE frames.

    The trailing fragment after the last blank line is held back and
    prepended to the next ``feed``. Frames come out in arrival order.
    """

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text of the incomplete frame held back so far."""
        return self._buffer

    def feed(self, text: str) -> list[str]:
        if not text:
            return []
        parts = _FRAME_DELIMITER.split(self._buffer + text)
        self._buffer = parts.pop()
        # Runs of blank lines leave empty or newline-only parts behind.
        return [part for part in parts if part.strip()]

    def reset(self) -> None:
        self._buffer = ""


def parse_frame(frame_text: str) -> Frame:
    """Parse one frame's ``event:`` and ``data:`` lines.

    Data lines are trimmed and concatenated. Lines with any other prefix
    (comments, ``id:``, ``retry:``, garbage) are ignored.
    """
    event: str | None = None
    data = ""
    for line in _LINE_DELIMITER.split(frame_text):
        if line.startswith("event:"):
            event = line[6:].strip() or None
        elif line.startswith("data:"):
            data += line[5:].strip()
    return Frame(event=event, data=data)
