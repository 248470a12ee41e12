"""GELF writer — compresses a record and ships it as one or more UDP datagrams.

Per call: COMPRESS -> DECIDE -> [FRAME] -> SEND each datagram -> DONE.
Nothing is carried between calls except the shared socket, which is
guarded by a lock.
"""

import logging
import threading

from gelf_sink.compression import get_codec
from gelf_sink.config import SinkConfig
from gelf_sink.errors import GelfSinkError, TooManyChunksError
from gelf_sink.framer import MAX_CHUNK_COUNT, chunk_count, frame
from gelf_sink.message_id import MessageIdGenerator
from gelf_sink.metrics import WriterMetrics
from gelf_sink.transport import UDPTransport

logger = logging.getLogger(__name__)


class GelfWriter:
    """Byte sink that ships serialized log records to a GELF collector.

    ``write`` returns the number of payload bytes sent. Failures raise a
    :class:`GelfSinkError` whose ``bytes_written`` tells how much left the
    process before the error; the record is dropped and never retried.
    """

    def __init__(
        self,
        config: SinkConfig,
        transport=None,
        id_generator: MessageIdGenerator | None = None,
        metrics: WriterMetrics | None = None,
    ):
        self._config = config
        self._codec = get_codec(config.compression, config.compression_level)
        self._ids = id_generator or MessageIdGenerator()
        self._metrics = metrics or WriterMetrics()
        self._lock = threading.Lock()
        # Codec is validated before the socket is dialed.
        self._transport = transport or UDPTransport(config.graylog_address, config.dial_timeout)

    @property
    def config(self) -> SinkConfig:
        return self._config

    @property
    def metrics(self) -> WriterMetrics:
        return self._metrics

    def write(self, raw: bytes) -> int:
        """Compress and send one record. Returns the bytes written."""
        with self._lock:
            try:
                return self._write(raw)
            except GelfSinkError as e:
                self._metrics.record_dropped(type(e).__name__, e.bytes_written)
                logger.warning("Dropped GELF record (%d bytes written): %s", e.bytes_written, e)
                raise

    def _write(self, raw: bytes) -> int:
        payload = self._codec.compress(raw)

        count = chunk_count(len(payload), self._config.chunk_size, self._config.chunk_data_size)
        if count > MAX_CHUNK_COUNT:
            raise TooManyChunksError(count, MAX_CHUNK_COUNT)
        if count > 1:
            return self._write_chunked(payload)

        n = self._transport.send(payload)
        self._metrics.record_sent(1, n)
        return n

    def _write_chunked(self, payload: bytes) -> int:
        """Frame *payload* under a fresh message id and send the chunks in order."""
        data_size = self._config.chunk_data_size
        chunks = frame(payload, data_size, self._ids.next())

        sent = 0
        for i, chunk in enumerate(chunks):
            try:
                self._transport.send(chunk)
            except GelfSinkError as e:
                # Chunks already on the wire stay there; the collector times out the message.
                e.bytes_written = sent
                raise
            sent += min(data_size, len(payload) - i * data_size)

        self._metrics.record_sent(len(chunks), sent, chunked=True)
        logger.debug("Sent %d bytes in %d chunks", sent, len(chunks))
        return sent

    def flush(self):
        """Datagrams are sent immediately; nothing to flush."""

    def close(self):
        """Close the underlying transport."""
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
