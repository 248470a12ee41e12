"""Exception taxonomy for the GELF sink.

Every error carries ``bytes_written``: how much of the record reached the
socket before the failure (0 unless a chunked send failed midway).
"""


class GelfSinkError(Exception):
    """Base class for all sink failures. The record is considered dropped."""

    def __init__(self, message: str, bytes_written: int = 0):
        super().__init__(message)
        self.bytes_written = bytes_written


class EncodingError(GelfSinkError):
    """Raised when the compressor cannot be initialized or fails."""


class EntropyError(GelfSinkError):
    """Raised when the random source cannot supply a full message id."""


class TooManyChunksError(GelfSinkError):
    """Raised before any I/O when a payload needs more chunks than allowed."""

    def __init__(self, count: int, maximum: int):
        super().__init__(f"need {count} chunks but should be less than or equal to {maximum}")
        self.count = count
        self.maximum = maximum


class SendError(GelfSinkError):
    """Raised when the socket rejects a datagram."""


class PartialSendError(SendError):
    """Raised when the socket accepts fewer bytes than the datagram holds."""

    def __init__(self, written: int, expected: int, bytes_written: int | None = None):
        super().__init__(
            f"wrote {written} bytes but should have written {expected} bytes",
            bytes_written if bytes_written is not None else written,
        )
        self.written = written
        self.expected = expected


class TransportUnavailableError(GelfSinkError):
    """Raised when the collector address cannot be dialed."""
