"""Shared pytest fixtures for the gelf sink test suite."""

from __future__ import annotations

import itertools
import socket

import pytest

from gelf_sink.config import SinkConfig
from gelf_sink.errors import SendError
from gelf_sink.message_id import MessageIdGenerator


class RecordingTransport:
    """Stands in for UDPTransport: records datagrams, optionally fails on the Nth send."""

    def __init__(self, fail_on: int | None = None, error: Exception | None = None):
        self.datagrams: list[bytes] = []
        self.closed = False
        self._fail_on = fail_on
        self._error = error
        self._calls = 0

    def send(self, data: bytes) -> int:
        self._calls += 1
        if self._fail_on is not None and self._calls == self._fail_on:
            raise self._error or SendError("simulated send failure")
        self.datagrams.append(bytes(data))
        return len(data)

    def close(self):
        self.closed = True


def counting_source():
    """Deterministic entropy source: ids 00..01, 00..02, ... as 8-byte big-endian."""
    counter = itertools.count(1)
    return lambda n: next(counter).to_bytes(n, "big")


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def id_generator() -> MessageIdGenerator:
    return MessageIdGenerator(counting_source())


@pytest.fixture()
def config() -> SinkConfig:
    return SinkConfig(graylog_address="127.0.0.1:12201", app_name="test", hostname="test-host")


@pytest.fixture()
def receiver():
    """A bound loopback UDP socket; yields (sock, "host:port")."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5.0)
    host, port = sock.getsockname()
    try:
        yield sock, f"{host}:{port}"
    finally:
        sock.close()
