"""Tests for morphstream.types."""

import pytest

from morphstream.types import TERMINAL_STATUSES, Frame, is_done, object_type


class TestFrame:
    def test_fields(self):
        frame = Frame(event="response.completed", data="{}")
        assert frame.event == "response.completed"
        assert frame.data == "{}"

    def test_immutable(self):
        frame = Frame(event=None, data="")
        with pytest.raises(AttributeError):
            frame.data = "x"  # type: ignore[misc]


class TestObjectType:
    def test_type_discriminant(self):
        assert object_type({"type": "entry"}) == "entry"

    def test_missing_type(self):
        assert object_type({"surface": "ev"}) is None

    def test_non_string_type(self):
        assert object_type({"type": 3}) is None

    def test_is_done(self):
        assert is_done({"type": "done"})
        assert not is_done({"type": "entry"})
        assert not is_done({})


class TestStatuses:
    def test_terminal(self):
        assert TERMINAL_STATUSES == {"done", "error", "cancelled"}
