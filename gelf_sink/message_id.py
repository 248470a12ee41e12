"""Message-id generator for chunked GELF messages."""

import os
import threading
from typing import Callable

from gelf_sink.errors import EntropyError

MESSAGE_ID_SIZE = 8


class MessageIdGenerator:
    """Produces 8-byte message ids from a cryptographically secure source.

    *source* is any ``callable(n) -> bytes``; it defaults to ``os.urandom``.
    Tests pass a deterministic source to assert exact chunk headers.
    """

    def __init__(self, source: Callable[[int], bytes] = os.urandom):
        self._source = source
        self._lock = threading.Lock()

    def next(self) -> bytes:
        """Return a fresh message id. Raises EntropyError if the source runs dry."""
        try:
            with self._lock:
                message_id = self._source(MESSAGE_ID_SIZE)
        except (OSError, NotImplementedError) as e:
            raise EntropyError(f"random source failed: {e}") from e

        if message_id is None or len(message_id) < MESSAGE_ID_SIZE:
            got = 0 if message_id is None else len(message_id)
            raise EntropyError(f"random source returned {got}/{MESSAGE_ID_SIZE} bytes")
        return bytes(message_id[:MESSAGE_ID_SIZE])
