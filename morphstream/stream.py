"""StreamSession: drive the decode → frame → dispatch → extract pipeline."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator, Iterator

import httpx

from .decoder import ChunkDecoder
from .dispatch import AppendText, Complete, Fail, dispatch
from .errors import ConnectionError, MorphstreamError, StreamError, TimeoutError
from .extractor import MAX_BUFFER_CHARS, JsonObjectExtractor
from .sse import FrameSplitter, parse_frame
from .types import TERMINAL_STATUSES, StreamObject, StreamStatus, is_done

logger = logging.getLogger(__name__)

ResponseOpener = Callable[[], httpx.Response]
ObjectCallback = Callable[[StreamObject], None]


class StreamSession:
    """One streaming request and the objects extracted from it.

    Iterate with ``for obj in session`` to receive objects as their closing
    brace arrives, or call ``session.collect()`` to wait for all content
    objects. The session is single-use and owns all of its buffers.

    States move ``idle → running → done | error | cancelled``. ``cancel()``
    may be called from any thread; it stops further reads and emissions and
    closes the connection. A session that ends in ``error`` raises its
    :attr:`error` once, when iteration finishes.
    """

    def __init__(
        self,
        open_response: ResponseOpener,
        *,
        on_object: ObjectCallback | None = None,
        max_buffer_chars: int | None = MAX_BUFFER_CHARS,
        timeout: float | None = None,
    ) -> None:
        self._open_response = open_response
        self._timeout = timeout
        self._on_object = on_object
        self._decoder = ChunkDecoder()
        self._splitter = FrameSplitter()
        self._extractor = JsonObjectExtractor(max_buffer_chars=max_buffer_chars)
        self._response: httpx.Response | None = None
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._generator: Generator[StreamObject, None, None] | None = None
        self.status: StreamStatus = "idle"
        self.error: MorphstreamError | None = None
        self.emitted = 0

    # -- State -----------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def buffer(self) -> str:
        """Model text received but not yet consumed into an object."""
        return self._extractor.buffer

    # -- Lifecycle -------------------------------------------------------------

    def start(self) -> StreamSession:
        """Open the transport. Failures move the session to ``error``."""
        with self._lock:
            if self.status != "idle":
                return self
            self.status = "running"
        self.emitted = 0
        self._decoder.reset()
        self._splitter.reset()
        self._extractor.reset()
        logger.info("Stream session started")
        try:
            response = self._open_response()
        except MorphstreamError as exc:
            self._fail(exc)
            return self
        except httpx.HTTPError as exc:
            self._fail(ConnectionError(message=str(exc) or "Request failed", cause=exc))
            return self
        with self._lock:
            self._response = response
            cancelled = self.cancelled
        if cancelled:
            self._release()
        return self

    def cancel(self) -> None:
        """Stop the session. A no-op once the session is terminal."""
        with self._lock:
            if self.is_terminal:
                return
            self._cancelled.set()
            self.status = "cancelled"
        logger.info("Stream session cancelled")
        self._release()

    def __enter__(self) -> StreamSession:
        return self

    def __exit__(self, *_: object) -> None:
        self.cancel()

    # -- Consumption -----------------------------------------------------------

    def __iter__(self) -> Iterator[StreamObject]:
        if self._generator is None:
            self._generator = self._run()
        return self._generator

    def collect(self) -> list[StreamObject]:
        """Consume the stream and return the content objects, without ``done``."""
        return [obj for obj in self if not is_done(obj)]

    # -- Read loop -------------------------------------------------------------

    def _run(self) -> Generator[StreamObject, None, None]:
        try:
            self.start()
            if self.status == "running":
                yield from self._read_loop()
        finally:
            self._release()
            if self.status == "running":
                # Consumer stopped iterating before a terminal signal.
                self.cancel()
        if self.status == "error" and self.error is not None:
            raise self.error

    def _read_loop(self) -> Generator[StreamObject, None, None]:
        response = self._response
        if response is None:
            return
        try:
            for chunk in response.iter_bytes():
                if self.cancelled:
                    return
                yield from self._process_text(self._decoder.decode(chunk))
                if self.status != "running":
                    return
            if self.cancelled:
                return
            yield from self._process_text(self._decoder.flush())
        except httpx.TimeoutException:
            if not self.cancelled:
                self._fail(
                    TimeoutError(
                        message=f"No data received within {self._timeout}s",
                        timeout_ms=int((self._timeout or 0) * 1000),
                    )
                )
            return
        except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
            if not self.cancelled:
                self._fail(
                    ConnectionError(message=str(exc) or "Stream read failed", cause=exc)
                )
            return
        if self.status == "running":
            # Transport ended cleanly without an explicit terminal signal.
            yield from self._emit(self._extractor.extract())
            self._finish()

    def _process_text(self, text: str) -> Generator[StreamObject, None, None]:
        for frame_text in self._splitter.feed(text):
            action = dispatch(parse_frame(frame_text))
            if isinstance(action, AppendText):
                yield from self._emit(self._extractor.append(action.text))
            elif isinstance(action, Complete):
                yield from self._emit(self._extractor.extract())
                self._finish()
            elif isinstance(action, Fail):
                logger.warning("Upstream error event %r: %s", action.event, action.message)
                self._fail(StreamError(message=action.message, event=action.event))
            if self.status != "running":
                return

    def _emit(self, objects: list[StreamObject]) -> Generator[StreamObject, None, None]:
        for obj in objects:
            if self.status != "running":
                return
            self.emitted += 1
            if self._on_object is not None:
                self._on_object(obj)
            yield obj
            if is_done(obj):
                self._finish()

    # -- Transitions -----------------------------------------------------------

    def _finish(self) -> None:
        with self._lock:
            if self.status != "running":
                return
            self.status = "done"
        logger.info("Stream session completed with %d objects", self.emitted)
        self._release()

    def _fail(self, error: MorphstreamError) -> None:
        with self._lock:
            if self.status != "running":
                return
            self.status = "error"
            self.error = error
        logger.warning("Stream session failed: %s", error)
        self._release()

    def _release(self) -> None:
        with self._lock:
            response, self._response = self._response, None
        if response is not None:
            response.close()
