"""Incremental UTF-8 decoding of network chunks."""

from __future__ import annotations

import codecs


class ChunkDecoder:
    """Decode raw byte chunks into text, carrying split multi-byte sequences.

    Bytes that end mid-character are held back and prepended to the next
    chunk. Invalid sequences decode to U+FFFD instead of raising.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def decode(self, chunk: bytes) -> str:
        return self._decoder.decode(chunk, final=False)

    def flush(self) -> str:
        """Decode whatever is still held back at end of stream."""
        text = self._decoder.decode(b"", final=True)
        self._decoder.reset()
        return text

    def reset(self) -> None:
        self._decoder.reset()
