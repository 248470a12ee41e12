"""Tests for gelf_sink/framer.py — chunk math, header layout, reassembly."""

import os
import struct

import pytest

from gelf_sink.errors import TooManyChunksError
from gelf_sink.framer import (
    HEADER_SIZE,
    MAGIC_BYTES,
    MAX_CHUNK_COUNT,
    chunk_count,
    frame,
    is_chunked,
    parse_chunk,
    reassemble,
)

CHUNK_SIZE = 1420
CAPACITY = CHUNK_SIZE - HEADER_SIZE  # 1408
MESSAGE_ID = bytes(range(1, 9))


class TestConstants:
    def test_header_size(self):
        assert HEADER_SIZE == 12

    def test_magic(self):
        assert MAGIC_BYTES == b"\x1e\x0f"

    def test_max_chunk_count(self):
        assert MAX_CHUNK_COUNT == 128


class TestChunkCount:
    def test_fits_in_one_datagram(self):
        assert chunk_count(11, CHUNK_SIZE, CAPACITY) == 1

    def test_exactly_chunk_size_is_unchunked(self):
        assert chunk_count(CHUNK_SIZE, CHUNK_SIZE, CAPACITY) == 1

    def test_one_byte_over_is_chunked(self):
        assert chunk_count(CHUNK_SIZE + 1, CHUNK_SIZE, CAPACITY) == 2

    def test_exact_multiple_of_capacity(self):
        assert chunk_count(5 * CAPACITY, CHUNK_SIZE, CAPACITY) == 5

    def test_one_over_multiple(self):
        assert chunk_count(5 * CAPACITY + 1, CHUNK_SIZE, CAPACITY) == 6

    def test_empty_payload(self):
        assert chunk_count(0, CHUNK_SIZE, CAPACITY) == 1


class TestFrame:
    def test_header_layout(self):
        chunks = frame(b"a" * (CAPACITY + 10), CAPACITY, MESSAGE_ID)
        assert len(chunks) == 2

        magic, message_id, seq, total = struct.unpack("!2s8sBB", chunks[0][:HEADER_SIZE])
        assert magic == b"\x1e\x0f"
        assert message_id == MESSAGE_ID
        assert (seq, total) == (0, 2)
        assert chunks[0][2:10] == MESSAGE_ID
        assert chunks[1][10] == 1
        assert chunks[1][11] == 2

    def test_chunk_sizes(self):
        chunks = frame(b"a" * (CAPACITY + 10), CAPACITY, MESSAGE_ID)
        assert len(chunks[0]) == CHUNK_SIZE
        assert len(chunks[1]) == HEADER_SIZE + 10

    def test_all_chunks_share_id_and_total(self):
        chunks = frame(os.urandom(7 * CAPACITY - 3), CAPACITY, MESSAGE_ID)
        headers = [parse_chunk(c) for c in chunks]
        assert {h.message_id for h in headers} == {MESSAGE_ID}
        assert {h.total for h in headers} == {7}
        assert [h.sequence for h in headers] == list(range(7))

    def test_exact_multiple_has_no_empty_chunk(self):
        chunks = frame(b"z" * (3 * CAPACITY), CAPACITY, MESSAGE_ID)
        assert len(chunks) == 3
        assert all(len(c) == CHUNK_SIZE for c in chunks)

    @pytest.mark.parametrize(
        "length",
        [1, CAPACITY - 1, CAPACITY, CAPACITY + 1, 5 * CAPACITY, 128 * CAPACITY],
    )
    def test_reassembly_reproduces_payload(self, length):
        payload = os.urandom(length)
        chunks = frame(payload, CAPACITY, MESSAGE_ID)
        joined = b"".join(parse_chunk(c).payload for c in chunks)
        assert joined == payload
        assert reassemble(chunks) == payload

    def test_128_chunks_is_the_limit(self):
        chunks = frame(bytes(128 * CAPACITY), CAPACITY, MESSAGE_ID)
        assert len(chunks) == 128
        assert parse_chunk(chunks[-1]).sequence == 127

    def test_129_chunks_raises(self):
        with pytest.raises(TooManyChunksError) as exc_info:
            frame(bytes(128 * CAPACITY + 1), CAPACITY, MESSAGE_ID)
        assert exc_info.value.count == 129
        assert exc_info.value.maximum == 128
        assert "129" in str(exc_info.value)
        assert "128" in str(exc_info.value)


class TestParseChunk:
    def test_is_chunked(self):
        chunk = frame(b"x" * 20, 10, MESSAGE_ID)[0]
        assert is_chunked(chunk)
        assert not is_chunked(b"\x1f\x8b gzip data")
        assert not is_chunked(b"")

    def test_too_short(self):
        with pytest.raises(ValueError, match="at least 12 bytes"):
            parse_chunk(b"\x1e\x0f\x00")

    def test_bad_magic(self):
        with pytest.raises(ValueError, match="Bad chunk magic"):
            parse_chunk(b"\x1f\x8b" + bytes(10))

    def test_sequence_out_of_range(self):
        bad = struct.pack("!2s8sBB", MAGIC_BYTES, MESSAGE_ID, 3, 3)
        with pytest.raises(ValueError, match="Bad chunk sequence"):
            parse_chunk(bad)


class TestReassemble:
    def test_out_of_order(self):
        payload = os.urandom(55)
        chunks = frame(payload, 10, MESSAGE_ID)
        assert reassemble(reversed(chunks)) == payload

    def test_missing_chunk(self):
        chunks = frame(os.urandom(55), 10, MESSAGE_ID)
        with pytest.raises(ValueError, match=r"Missing chunk sequences: \[2\]"):
            reassemble(chunks[:2] + chunks[3:])

    def test_duplicate_chunk(self):
        chunks = frame(os.urandom(25), 10, MESSAGE_ID)
        with pytest.raises(ValueError, match="Duplicate"):
            reassemble(chunks + chunks[:1])

    def test_mixed_messages(self):
        a = frame(os.urandom(25), 10, MESSAGE_ID)
        b = frame(os.urandom(25), 10, b"\xff" * 8)
        with pytest.raises(ValueError, match="different messages"):
            reassemble([a[0], b[1], a[2]])

    def test_empty(self):
        with pytest.raises(ValueError, match="No chunks"):
            reassemble([])
