"""Morphstream SDK client — the main entry point."""

from __future__ import annotations

import logging
import os
import threading

from .credentials import CredentialStore
from .errors import InputError
from .extractor import MAX_BUFFER_CHARS, extract_objects
from .http import HttpClient
from .prompts import DEFAULT_MODEL, build_request, output_text
from .stream import ObjectCallback, StreamSession
from .types import StreamObject, is_done

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com"
DEFAULT_TIMEOUT = 60.0
DEFAULT_RETRIES = 2
RESPONSES_PATH = "/v1/responses"

API_KEY_ENV_VARS = ("MORPHSTREAM_API_KEY", "OPENAI_API_KEY")
BASE_URL_ENV = "MORPHSTREAM_BASE_URL"


def _resolve_api_key(api_key: str | None, store: CredentialStore) -> str | None:
    if api_key and api_key.strip():
        return api_key.strip()
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return store.load()


def _require_query(query: str) -> str:
    cleaned = (query or "").strip()
    if not cleaned:
        raise InputError(message="Query must not be empty.")
    return cleaned


class Morphstream:
    """Morphstream SDK client.

    Holds at most one active stream: starting a new one cancels the last.

    Example::

        client = Morphstream(api_key="sk-...")
        for entry in client.start_stream("dog").collect():
            print(entry["surface"])
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        max_buffer_chars: int | None = MAX_BUFFER_CHARS,
        credentials: CredentialStore | None = None,
    ) -> None:
        self.credentials = credentials or CredentialStore()
        resolved_key = _resolve_api_key(api_key, self.credentials)
        if not resolved_key:
            raise InputError(
                message=(
                    "API key is required. Pass api_key, set MORPHSTREAM_API_KEY "
                    "or OPENAI_API_KEY, or save one with CredentialStore."
                )
            )

        self.model = model or DEFAULT_MODEL
        self._timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
        self._max_buffer_chars = max_buffer_chars
        self._http = HttpClient(
            api_key=resolved_key,
            base_url=base_url or os.environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL,
            timeout=self._timeout,
            retries=retries if retries is not None else DEFAULT_RETRIES,
        )
        self._lock = threading.Lock()
        self._active: StreamSession | None = None

    def close(self) -> None:
        """Cancel any active stream and close the underlying HTTP client."""
        self.cancel()
        self._http.close()

    def __enter__(self) -> Morphstream:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def active_session(self) -> StreamSession | None:
        """The running stream, if any."""
        session = self._active
        if session is None or session.is_terminal:
            return None
        return session

    def start_stream(
        self,
        query: str,
        *,
        on_object: ObjectCallback | None = None,
    ) -> StreamSession:
        """Start streaming the analysis of ``query``.

        Any stream this client still has running is cancelled first. The
        request is sent before this returns; transport failures leave the
        session in ``error`` and are raised when it is iterated.

        Args:
            query: Word or phrase to analyse. Must not be blank.
            on_object: Called with each object as it is extracted, in
                addition to it being yielded by iteration.

        Raises:
            InputError: ``query`` is blank. No request is sent.
        """
        cleaned = _require_query(query)
        body = build_request(cleaned, model=self.model, stream=True)

        session = StreamSession(
            lambda: self._http.request_stream("POST", RESPONSES_PATH, body=body),
            on_object=on_object,
            max_buffer_chars=self._max_buffer_chars,
            timeout=self._timeout,
        )
        with self._lock:
            previous, self._active = self._active, session
        if previous is not None and not previous.is_terminal:
            logger.info("Superseding running stream session")
            previous.cancel()
        return session.start()

    def cancel(self) -> None:
        """Cancel the active stream, if there is one."""
        with self._lock:
            session = self._active
        if session is not None:
            session.cancel()

    def analyze(self, query: str) -> list[StreamObject]:
        """Analyse ``query`` in one non-streamed request.

        Retries rate limits, server errors and network failures. Returns
        the content objects found in the model output, without ``done``.
        """
        cleaned = _require_query(query)
        res = self._http.request(
            "POST",
            RESPONSES_PATH,
            body=build_request(cleaned, model=self.model, stream=False),
        )
        objects, remainder = extract_objects(output_text(res or {}))
        if remainder.strip():
            logger.debug("Ignoring %d chars of trailing model output", len(remainder))
        return [obj for obj in objects if not is_done(obj)]
