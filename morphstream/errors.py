"""Typed error hierarchy for the Morphstream Python SDK."""

from __future__ import annotations

from typing import Literal

SdkErrorCode = Literal[
    "bad_request",
    "invalid_input",
    "unauthorized",
    "not_found",
    "rate_limited",
    "validation_error",
    "stream_error",
    "internal_error",
    "timeout",
    "connection_error",
]


class MorphstreamError(Exception):
    """Base error for all Morphstream SDK errors."""

    def __init__(
        self,
        *,
        code: SdkErrorCode,
        message: str,
        status: int,
        request_id: str,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.request_id = request_id


class InputError(MorphstreamError, ValueError):
    """Rejected before any network activity: empty query or credential."""

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="invalid_input", message=message, status=0, request_id=""
        )


class ValidationError(MorphstreamError):
    """Upstream rejected the request body or parameters (HTTP 400)."""

    def __init__(self, *, message: str, request_id: str) -> None:
        super().__init__(
            code="validation_error",
            message=message,
            status=400,
            request_id=request_id,
        )


class AuthenticationError(MorphstreamError):
    """Authentication failed — missing or invalid API key (HTTP 401)."""

    def __init__(self, *, message: str, request_id: str) -> None:
        super().__init__(
            code="unauthorized", message=message, status=401, request_id=request_id
        )


class NotFoundError(MorphstreamError):
    """Unknown endpoint or model (HTTP 404)."""

    def __init__(self, *, message: str, request_id: str) -> None:
        super().__init__(
            code="not_found", message=message, status=404, request_id=request_id
        )


class RateLimitError(MorphstreamError):
    """Rate limited (HTTP 429)."""

    def __init__(
        self, *, message: str, request_id: str, retry_after: float
    ) -> None:
        super().__init__(
            code="rate_limited", message=message, status=429, request_id=request_id
        )
        self.retry_after = retry_after


class StreamError(MorphstreamError):
    """The upstream stream carried an explicit error event."""

    def __init__(self, *, message: str, event: str | None = None) -> None:
        super().__init__(
            code="stream_error", message=message, status=0, request_id=""
        )
        self.event = event


class TimeoutError(MorphstreamError):
    """No response, or no further bytes, within the configured timeout."""

    def __init__(self, *, message: str, timeout_ms: int) -> None:
        super().__init__(
            code="timeout", message=message, status=0, request_id=""
        )
        self.timeout_ms = timeout_ms


class ConnectionError(MorphstreamError):
    """Network-level failure — could not connect or the connection dropped."""

    def __init__(
        self, *, message: str, cause: Exception | None = None
    ) -> None:
        super().__init__(
            code="connection_error", message=message, status=0, request_id=""
        )
        self.__cause__ = cause
