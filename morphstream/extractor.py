"""Brace-depth extraction of complete JSON objects from streamed model text."""

from __future__ import annotations

import enum
import json
import logging

from .types import StreamObject

logger = logging.getLogger(__name__)

MAX_BUFFER_CHARS = 512 * 1024


class ScanState(enum.Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    IN_STRING_ESCAPED = "in_string_escaped"


class JsonObjectExtractor:
    """Accumulate text deltas and pull out top-level JSON objects as they close.

    The scanner tracks brace depth outside string literals only, so braces
    and escaped quotes inside strings never split an object. Each closed
    candidate is parsed once; a candidate that fails to parse is dropped.
    Text that never closes an object stays in :attr:`buffer`, which is
    trimmed to its newest ``max_buffer_chars`` characters after every pass.

    Scan state survives between calls and trims, so each character is
    examined once. An object whose opening brace was trimmed away is dropped
    when it closes.
    """

    def __init__(self, max_buffer_chars: int | None = MAX_BUFFER_CHARS) -> None:
        self.max_buffer_chars = max_buffer_chars
        self.discarded = 0
        self._buffer = ""
        self._reset_scan()

    @property
    def buffer(self) -> str:
        """Text received but not yet consumed into an emitted object."""
        return self._buffer

    def append(self, text: str) -> list[StreamObject]:
        """Add a text delta and return every object it completes, in order."""
        if text:
            self._buffer += text
        return self.extract()

    def extract(self) -> list[StreamObject]:
        """Scan any unscanned text and return the objects that closed."""
        objects: list[StreamObject] = []
        buf = self._buffer
        i = self._pos

        while i < len(buf):
            ch = buf[i]
            if self._state is ScanState.IN_STRING_ESCAPED:
                self._state = ScanState.IN_STRING
            elif self._state is ScanState.IN_STRING:
                if ch == "\\":
                    self._state = ScanState.IN_STRING_ESCAPED
                elif ch == '"':
                    self._state = ScanState.NORMAL
            elif ch == '"':
                self._state = ScanState.IN_STRING
            elif ch == "{":
                if self._depth == 0:
                    self._start = i
                self._depth += 1
            elif ch == "}" and self._depth > 0:
                self._depth -= 1
                if self._depth == 0:
                    if self._start < 0:
                        self.discarded += 1
                    else:
                        obj = self._parse(buf[self._start : i + 1])
                        if obj is not None:
                            objects.append(obj)
                    buf = buf[i + 1 :]
                    i = 0
                    self._start = -1
                    continue
            i += 1

        self._buffer = buf
        self._pos = i
        self._enforce_cap()
        return objects

    def reset(self) -> None:
        self._buffer = ""
        self.discarded = 0
        self._reset_scan()

    def _reset_scan(self) -> None:
        self._pos = 0
        self._depth = 0
        self._start = -1
        self._state = ScanState.NORMAL

    def _parse(self, candidate: str) -> StreamObject | None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            self.discarded += 1
            logger.debug(
                "Discarding malformed object candidate (%d chars): %s",
                len(candidate),
                exc,
            )
            return None

    def _enforce_cap(self) -> None:
        limit = self.max_buffer_chars
        if limit is None or len(self._buffer) <= limit:
            return
        dropped = len(self._buffer) - limit
        self._buffer = self._buffer[dropped:]
        logger.debug("Text buffer over %d chars, dropped oldest %d", limit, dropped)
        self._pos -= dropped
        if self._start >= dropped:
            self._start -= dropped
        elif self._start >= 0:
            # Depth is still tracked; the object is dropped when it closes.
            self._start = -1


def extract_objects(text: str) -> tuple[list[StreamObject], str]:
    """Extract every complete top-level object from ``text``.

    Returns the objects in order and the unconsumed remainder.
    """
    extractor = JsonObjectExtractor(max_buffer_chars=None)
    objects = extractor.append(text)
    return objects, extractor.buffer
