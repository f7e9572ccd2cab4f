"""Morphstream Python SDK — streamed Turkish morphology breakdowns from an LLM."""

from .client import Morphstream
from .credentials import CredentialStore
from .decoder import ChunkDecoder
from .dispatch import AppendText, Complete, Fail, Ignore, dispatch
from .errors import (
    AuthenticationError,
    ConnectionError,
    InputError,
    MorphstreamError,
    NotFoundError,
    RateLimitError,
    StreamError,
    TimeoutError,
    ValidationError,
)
from .extractor import JsonObjectExtractor, extract_objects
from .sse import DONE_SENTINEL, FrameSplitter, parse_frame
from .stream import StreamSession
from .types import (
    DoneObject,
    EntryObject,
    Frame,
    MorphSpan,
    StreamObject,
    StreamStatus,
)

__all__ = [
    # Client
    "Morphstream",
    "CredentialStore",
    # Streaming
    "StreamSession",
    "ChunkDecoder",
    "FrameSplitter",
    "parse_frame",
    "DONE_SENTINEL",
    "dispatch",
    "AppendText",
    "Complete",
    "Fail",
    "Ignore",
    "JsonObjectExtractor",
    "extract_objects",
    # Errors
    "MorphstreamError",
    "InputError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "StreamError",
    "TimeoutError",
    "ConnectionError",
    # Types
    "Frame",
    "StreamObject",
    "StreamStatus",
    "EntryObject",
    "DoneObject",
    "MorphSpan",
]
