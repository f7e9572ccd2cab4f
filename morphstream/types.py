"""Type definitions for the Morphstream Python SDK."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, TypedDict

# ---------------------------------------------------------------------------
# Enums / Literal unions
# ---------------------------------------------------------------------------

StreamStatus = Literal[
    "idle",
    "running",
    "done",
    "error",
    "cancelled",
]

TERMINAL_STATUSES: frozenset[str] = frozenset({"done", "error", "cancelled"})

MorphTag = Literal["root", "plural", "poss", "case", "tense", "other"]

# ---------------------------------------------------------------------------
# Transport frames
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Frame:
    """One server-sent-event record: optional event name plus data payload."""

    event: str | None
    data: str


# ---------------------------------------------------------------------------
# Emitted objects
#
# The core passes every object through verbatim; these shapes document what
# the tutor prompt asks the model to produce.
# ---------------------------------------------------------------------------


class MorphSpan(TypedDict):
    start: int
    end: int
    tag: MorphTag
    gloss: str


class ExampleToken(TypedDict):
    surface: str
    gloss: str


class Example(TypedDict):
    tr: str
    en: str
    tokens: list[ExampleToken]


class Lemma(TypedDict):
    tr: str
    en: str


class Form(TypedDict):
    label: str
    explanation: str


class EntryObject(TypedDict, total=False):
    type: Literal["entry"]
    query: str
    pos: str
    lemma: Lemma
    form: Form
    surface: str
    morph: list[MorphSpan]
    notes: str
    examples: list[Example]


class DoneObject(TypedDict):
    type: Literal["done"]


StreamObject = dict[str, Any]

DONE_TYPE = "done"


def object_type(obj: StreamObject) -> str | None:
    """Return the ``type`` discriminant of an emitted object, if it has one."""
    value = obj.get("type")
    return value if isinstance(value, str) else None


def is_done(obj: StreamObject) -> bool:
    return object_type(obj) == DONE_TYPE
