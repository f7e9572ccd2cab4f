"""Tests for morphstream.decoder — incremental UTF-8 decoding."""

import pytest

from morphstream.decoder import ChunkDecoder

TEXT = 'event: x\ndata: {"delta":"köpekler ağaçların çiçeği 🐕"}\n\n'


def decode_split(data: bytes, sizes: list[int]) -> str:
    decoder = ChunkDecoder()
    out = ""
    pos = 0
    for size in sizes:
        out += decoder.decode(data[pos : pos + size])
        pos += size
    out += decoder.decode(data[pos:])
    return out + decoder.flush()


class TestChunkDecoder:
    def test_single_chunk(self):
        decoder = ChunkDecoder()
        assert decoder.decode(TEXT.encode()) == TEXT

    def test_split_inside_two_byte_character(self):
        data = "ö".encode()
        decoder = ChunkDecoder()
        assert decoder.decode(data[:1]) == ""
        assert decoder.decode(data[1:]) == "ö"

    def test_split_inside_four_byte_character(self):
        data = "🐕".encode()
        decoder = ChunkDecoder()
        assert decoder.decode(data[:1]) == ""
        assert decoder.decode(data[1:3]) == ""
        assert decoder.decode(data[3:]) == "🐕"

    def test_every_split_point_matches_whole_decode(self):
        data = TEXT.encode()
        for cut in range(len(data) + 1):
            assert decode_split(data, [cut]) == TEXT

    def test_byte_at_a_time(self):
        data = TEXT.encode()
        assert decode_split(data, [1] * len(data)) == TEXT

    def test_invalid_bytes_are_replaced(self):
        decoder = ChunkDecoder()
        assert decoder.decode(b"ok \xff ok") == "ok � ok"

    def test_flush_replaces_truncated_sequence(self):
        decoder = ChunkDecoder()
        assert decoder.decode("ğ".encode()[:1]) == ""
        assert decoder.flush() == "�"

    def test_flush_resets_state(self):
        decoder = ChunkDecoder()
        decoder.decode("ğ".encode()[:1])
        decoder.flush()
        assert decoder.decode(b"abc") == "abc"

    @pytest.mark.parametrize("sizes", [[3, 5, 7], [2] * 20, [1, 1, 30]])
    def test_mixed_chunk_sizes(self, sizes):
        assert decode_split(TEXT.encode(), sizes) == TEXT
