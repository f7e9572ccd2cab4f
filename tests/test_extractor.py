"""Tests for morphstream.extractor — brace-depth JSON object extraction."""

import json

from morphstream.extractor import (
    MAX_BUFFER_CHARS,
    JsonObjectExtractor,
    ScanState,
    extract_objects,
)

ENTRY = {
    "type": "entry",
    "surface": "köpekler",
    "morph": [
        {"start": 0, "end": 5, "tag": "root", "gloss": "köpek (dog)"},
        {"start": 5, "end": 8, "tag": "plural", "gloss": "-ler"},
    ],
    "notes": 'braces { and } and an escaped " quote',
}


class TestExtractObjects:
    def test_single_object(self):
        objects, remainder = extract_objects('{"type":"entry","surface":"köpek"}')
        assert objects == [{"type": "entry", "surface": "köpek"}]
        assert remainder == ""

    def test_ndjson_lines(self):
        text = '{"type":"entry","n":1}\n{"type":"entry","n":2}\n{"type":"done"}\n'
        objects, remainder = extract_objects(text)
        assert [o.get("n") for o in objects] == [1, 2, None]
        assert objects[-1] == {"type": "done"}
        assert remainder == "\n"

    def test_noise_between_objects_is_never_emitted(self):
        text = 'Sure! Here you go:\n{"n":1} and then, {"n":2} finally'
        objects, remainder = extract_objects(text)
        assert objects == [{"n": 1}, {"n": 2}]
        assert remainder == " finally"

    def test_braces_and_escaped_quotes_in_strings(self):
        objects, _ = extract_objects('{"a":"text with } and \\" inside"}')
        assert objects == [{"a": 'text with } and " inside'}]

    def test_escaped_backslash_before_quote(self):
        objects, _ = extract_objects('{"a":"ends with \\\\"}{"b":1}')
        assert objects == [{"a": "ends with \\"}, {"b": 1}]

    def test_nested_objects_emitted_once(self):
        objects, _ = extract_objects(json.dumps(ENTRY))
        assert objects == [ENTRY]

    def test_malformed_candidate_is_discarded(self):
        objects, remainder = extract_objects('{"a":1,}{"b":2}')
        assert objects == [{"b": 2}]
        assert remainder == ""

    def test_unfinished_object_is_remainder(self):
        objects, remainder = extract_objects('{"a":1} {"b":')
        assert objects == [{"a": 1}]
        assert remainder == ' {"b":'

    def test_stray_closing_brace_ignored(self):
        objects, remainder = extract_objects('} {"a":1}')
        assert objects == [{"a": 1}]
        assert remainder == ""


class TestJsonObjectExtractor:
    def test_split_object_emits_once_complete(self):
        text = json.dumps(ENTRY)
        for cut in range(1, len(text)):
            extractor = JsonObjectExtractor()
            assert extractor.append(text[:cut]) == []
            assert extractor.append(text[cut:]) == [ENTRY]
            assert extractor.buffer == ""

    def test_character_at_a_time(self):
        text = json.dumps(ENTRY) + "\n" + json.dumps({"type": "done"})
        extractor = JsonObjectExtractor()
        emitted = []
        for ch in text:
            emitted.extend(extractor.append(ch))
        assert emitted == [ENTRY, {"type": "done"}]

    def test_multiple_objects_in_one_append(self):
        extractor = JsonObjectExtractor()
        assert extractor.append('{"n":1}{"n":2}{"n":') == [{"n": 1}, {"n": 2}]
        assert extractor.buffer == '{"n":'
        assert extractor.append("3}") == [{"n": 3}]

    def test_extract_without_new_text(self):
        extractor = JsonObjectExtractor()
        extractor.append('{"n":1')
        assert extractor.extract() == []
        assert extractor.buffer == '{"n":1'

    def test_counts_discarded_candidates(self):
        extractor = JsonObjectExtractor()
        extractor.append("{not json}")
        assert extractor.discarded == 1
        assert extractor.buffer == ""

    def test_noise_stays_within_cap(self):
        extractor = JsonObjectExtractor(max_buffer_chars=1000)
        for _ in range(500):
            assert extractor.append("no json here, just prose. ") == []
            assert len(extractor.buffer) <= 1000

    def test_default_cap(self):
        extractor = JsonObjectExtractor()
        extractor.append("x" * (MAX_BUFFER_CHARS + 10))
        assert len(extractor.buffer) == MAX_BUFFER_CHARS

    def test_cap_keeps_newest_text(self):
        extractor = JsonObjectExtractor(max_buffer_chars=5)
        extractor.append("abcdefgh")
        assert extractor.buffer == "defgh"

    def test_object_after_trimmed_noise(self):
        extractor = JsonObjectExtractor(max_buffer_chars=50)
        extractor.append("noise " * 40)
        assert extractor.append('{"type":"entry"}') == [{"type": "entry"}]

    def test_partial_object_survives_trim_of_leading_noise(self):
        extractor = JsonObjectExtractor(max_buffer_chars=8)
        extractor.append("0123456789" + '{"a":')
        assert extractor.buffer == '789{"a":'
        assert extractor.append("1}") == [{"a": 1}]

    def test_object_cut_by_trim_is_dropped(self):
        extractor = JsonObjectExtractor(max_buffer_chars=10)
        extractor.append('{"big":"' + "y" * 30)
        assert len(extractor.buffer) == 10
        # Braces and quotes in the rest of the string are still seen as string text.
        assert extractor.append('{"}{"ok":1}') == [{"ok": 1}]
        assert extractor.discarded == 1
        assert extractor.buffer == ""

    def test_reset(self):
        extractor = JsonObjectExtractor()
        extractor.append('{"a":"open string')
        extractor.reset()
        assert extractor.buffer == ""
        assert extractor._state is ScanState.NORMAL
        assert extractor.append('{"a":1}') == [{"a": 1}]

    def test_unbounded(self):
        extractor = JsonObjectExtractor(max_buffer_chars=None)
        extractor.append("z" * (MAX_BUFFER_CHARS + 1))
        assert len(extractor.buffer) == MAX_BUFFER_CHARS + 1
