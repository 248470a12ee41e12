"""UDP transport — a connected datagram socket with one best-effort send."""

import logging
import socket

from gelf_sink.config import DEFAULT_DIAL_TIMEOUT, parse_address
from gelf_sink.errors import PartialSendError, SendError, TransportUnavailableError

logger = logging.getLogger(__name__)


class UDPTransport:
    """Owns a UDP socket connected to the collector.

    Datagrams are fire-and-forget: no acknowledgement, no retry.
    """

    def __init__(self, address: str, timeout: float = DEFAULT_DIAL_TIMEOUT):
        self._address = address
        self._sock: socket.socket | None = None

        try:
            host, port = parse_address(address)
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                host, port, type=socket.SOCK_DGRAM,
            )[0]
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(timeout)
            try:
                sock.connect(sockaddr)
            except OSError:
                sock.close()
                raise
        except (OSError, ValueError) as e:
            raise TransportUnavailableError(f"could not dial {address}: {e}") from e

        self._sock = sock
        logger.info("Connected to %s (%s)", address, sockaddr)

    @property
    def address(self) -> str:
        return self._address

    @property
    def closed(self) -> bool:
        return self._sock is None

    def send(self, data: bytes) -> int:
        """Send one datagram. Returns the number of bytes written.

        Raises:
            SendError: If the socket is closed or rejects the datagram.
            PartialSendError: If fewer bytes than ``len(data)`` were accepted.
        """
        if self._sock is None:
            raise SendError("transport is closed")
        try:
            n = self._sock.send(data)
        except OSError as e:
            raise SendError(f"send to {self._address} failed: {e}") from e

        if n != len(data):
            raise PartialSendError(n, len(data))
        return n

    def close(self):
        """Close the socket."""
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f"<UDPTransport(address={self._address!r})>"
