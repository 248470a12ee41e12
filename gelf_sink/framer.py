"""GELF chunk framing: 12-byte header + payload slice.

Header layout (big-endian / single bytes):
  Offset 0:  2-byte magic 0x1e 0x0f
  Offset 2:  8-byte message id
  Offset 10: 1-byte sequence index (0-based)
  Offset 11: 1-byte total chunk count

See http://docs.graylog.org/en/2.4/pages/gelf.html.
"""

import struct
from typing import Iterable, NamedTuple

from gelf_sink.errors import TooManyChunksError

MAGIC_BYTES = b"\x1e\x0f"
HEADER_FORMAT = "!2s8sBB"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 12
MAX_CHUNK_COUNT = 128


class ChunkHeader(NamedTuple):
    message_id: bytes
    sequence: int
    total: int
    payload: bytes


def chunk_count(length: int, chunk_size: int, chunk_data_size: int) -> int:
    """Number of datagrams needed for a compressed payload of *length* bytes.

    Payloads that fit in *chunk_size* go out unchunked (count 1); larger ones
    are split into slices of *chunk_data_size*.
    """
    if length <= chunk_size:
        return 1
    return -(-length // chunk_data_size)


def frame(payload: bytes, chunk_data_size: int, message_id: bytes) -> list[bytes]:
    """Split *payload* into ordered GELF chunks sharing *message_id*.

    Raises:
        TooManyChunksError: If more than MAX_CHUNK_COUNT chunks are needed.
            Checked before any chunk is built.
    """
    count = -(-len(payload) // chunk_data_size)
    if count > MAX_CHUNK_COUNT:
        raise TooManyChunksError(count, MAX_CHUNK_COUNT)

    view = memoryview(payload)
    chunks = []
    for seq in range(count):
        off = seq * chunk_data_size
        header = struct.pack(HEADER_FORMAT, MAGIC_BYTES, message_id, seq, count)
        chunks.append(header + view[off:off + chunk_data_size].tobytes())
    return chunks


def is_chunked(datagram: bytes) -> bool:
    """Return True if *datagram* starts with the GELF chunk magic."""
    return datagram[:2] == MAGIC_BYTES


def parse_chunk(datagram: bytes) -> ChunkHeader:
    """Decode a chunk datagram into its header fields and payload slice.

    Raises:
        ValueError: If the datagram is shorter than a header or lacks the magic.
    """
    if len(datagram) < HEADER_SIZE:
        raise ValueError(f"Chunk must be at least {HEADER_SIZE} bytes, got {len(datagram)}")

    magic, message_id, seq, total = struct.unpack(HEADER_FORMAT, datagram[:HEADER_SIZE])
    if magic != MAGIC_BYTES:
        raise ValueError(f"Bad chunk magic: {magic!r}")
    if not 0 < total <= MAX_CHUNK_COUNT or seq >= total:
        raise ValueError(f"Bad chunk sequence {seq}/{total}")
    return ChunkHeader(message_id, seq, total, datagram[HEADER_SIZE:])


def reassemble(datagrams: Iterable[bytes]) -> bytes:
    """Rebuild the compressed payload from the chunks of one message.

    Chunks may arrive in any order.

    Raises:
        ValueError: On mixed message ids, duplicates, or missing sequences.
    """
    parts: dict[int, bytes] = {}
    message_id = None
    total = None
    for datagram in datagrams:
        chunk = parse_chunk(datagram)
        if message_id is None:
            message_id, total = chunk.message_id, chunk.total
        elif chunk.message_id != message_id or chunk.total != total:
            raise ValueError("Chunks belong to different messages")
        if chunk.sequence in parts:
            raise ValueError(f"Duplicate chunk sequence {chunk.sequence}")
        parts[chunk.sequence] = chunk.payload

    if total is None:
        raise ValueError("No chunks to reassemble")
    if len(parts) != total:
        missing = sorted(set(range(total)) - set(parts))
        raise ValueError(f"Missing chunk sequences: {missing}")
    return b"".join(parts[i] for i in range(total))
