"""Internal HTTP client with retry, backoff, streaming send, and error parsing."""

from __future__ import annotations

import json
import logging
import random
import time
from typing import Any

import httpx

from .errors import (
    AuthenticationError,
    ConnectionError,
    MorphstreamError,
    NotFoundError,
    RateLimitError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_RATE_LIMIT_WAIT_S = 60.0


def _backoff_delay(attempt: int) -> float:
    """Exponential backoff with jitter."""
    base = min(1.0 * (2**attempt), 30.0)
    jitter = random.random() * base * 0.5  # noqa: S311
    return base + jitter


class HttpClient:
    """Internal HTTP client for the Morphstream SDK."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout: float,
        retries: int,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": accept,
        }

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Any | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make a JSON API request with retry logic."""
        headers = self._headers("application/json")
        effective_timeout = timeout if timeout is not None else self._timeout

        last_error: Exception | None = None

        for attempt in range(self._retries + 1):
            if attempt > 0 and last_error is not None:
                if isinstance(last_error, RateLimitError):
                    delay = min(last_error.retry_after, MAX_RATE_LIMIT_WAIT_S)
                else:
                    delay = _backoff_delay(attempt - 1)
                logger.info(
                    "Retrying %s %s in %.1fs (attempt %d of %d): %s",
                    method,
                    path,
                    delay,
                    attempt + 1,
                    self._retries + 1,
                    last_error,
                )
                time.sleep(delay)

            try:
                response = self._client.request(
                    method,
                    path,
                    headers=headers,
                    json=body,
                    timeout=effective_timeout,
                )

                if response.is_success:
                    if response.status_code == 204:
                        return None
                    return response.json()

                error = _parse_error_response(response, response.content)

                if attempt < self._retries and (
                    isinstance(error, RateLimitError) or response.status_code >= 500
                ):
                    last_error = error
                    continue

                raise error

            except httpx.TimeoutException as exc:
                if attempt < self._retries:
                    last_error = exc
                    continue
                raise TimeoutError(
                    message=f"Request timed out after {effective_timeout}s",
                    timeout_ms=int(effective_timeout * 1000),
                ) from exc

            except (httpx.TransportError, OSError) as exc:
                if attempt < self._retries:
                    last_error = exc
                    continue
                raise ConnectionError(
                    message=str(exc) or "Network request failed",
                    cause=exc,
                ) from exc

            except httpx.HTTPError as exc:
                raise ConnectionError(
                    message=str(exc) or "Request failed",
                    cause=exc,
                ) from exc

        # Exhausted retries
        if last_error is not None:
            raise _wrap_raw_error(last_error, effective_timeout)
        raise ConnectionError(  # pragma: no cover
            message="Request failed after retries"
        )

    def request_stream(
        self,
        method: str,
        path: str,
        *,
        body: Any | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a request and return the response with its body unread.

        The caller owns the returned response and must close it. Streaming
        calls are never retried.
        """
        effective_timeout = timeout if timeout is not None else self._timeout

        try:
            request = self._client.build_request(
                method,
                path,
                headers=self._headers("text/event-stream"),
                json=body,
            )
            response = self._client.send(
                request,
                stream=True,
                timeout=effective_timeout,
            )

            if not response.is_success:
                try:
                    body_bytes = response.read()
                finally:
                    response.close()
                raise _parse_error_response(response, body_bytes)

            return response

        except MorphstreamError:
            raise

        except httpx.TimeoutException as exc:
            raise TimeoutError(
                message=f"Request timed out after {effective_timeout}s",
                timeout_ms=int(effective_timeout * 1000),
            ) from exc

        except (httpx.ConnectError, httpx.NetworkError, OSError) as exc:
            raise ConnectionError(
                message=str(exc) or "Network request failed",
                cause=exc,
            ) from exc

        except httpx.HTTPError as exc:
            raise ConnectionError(
                message=str(exc) or "Request failed",
                cause=exc,
            ) from exc


def _try_parse_json_bytes(data: bytes) -> Any:
    try:
        return json.loads(data)
    except Exception:
        return None


def _error_message(status: int, body: bytes, error_body: Any) -> str:
    """Message from ``{"error": {"message": ...}}``, ``{"message": ...}``, or raw text."""
    if isinstance(error_body, dict):
        nested = error_body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if isinstance(nested, str) and nested:
            return nested
        if error_body.get("message"):
            return str(error_body["message"])
    text = body.decode("utf-8", errors="replace").strip()
    return text or f"HTTP {status}"


def _retry_after(response: httpx.Response) -> float:
    try:
        return float(response.headers.get("retry-after", "1")) or 1.0
    except ValueError:
        return 1.0


def _parse_error_response(response: httpx.Response, body: bytes) -> MorphstreamError:
    status = response.status_code
    error_body = _try_parse_json_bytes(body)
    message = _error_message(status, body, error_body)
    request_id = response.headers.get("x-request-id", "")

    if status == 400:
        return ValidationError(message=message, request_id=request_id)
    if status in (401, 403):
        return AuthenticationError(message=message, request_id=request_id)
    if status == 404:
        return NotFoundError(message=message, request_id=request_id)
    if status == 429:
        return RateLimitError(
            message=message,
            request_id=request_id,
            retry_after=_retry_after(response),
        )
    return MorphstreamError(
        code="internal_error" if status >= 500 else "bad_request",
        message=message,
        status=status,
        request_id=request_id,
    )


def _wrap_raw_error(error: Exception, timeout: float) -> MorphstreamError:
    if isinstance(error, MorphstreamError):
        return error
    if isinstance(error, httpx.TimeoutException):
        return TimeoutError(
            message=f"Request timed out after {timeout}s",
            timeout_ms=int(timeout * 1000),
        )
    return ConnectionError(
        message=str(error) or "Network request failed",
        cause=error,
    )
