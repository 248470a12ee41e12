"""Configuration module — frozen dataclass loaded from environment variables or YAML."""

import argparse
import os
import socket
from dataclasses import dataclass, field, fields, replace

import yaml

from gelf_sink.compression import ALGORITHMS
from gelf_sink.framer import HEADER_SIZE

# Default WAN chunk size, see http://docs.graylog.org/en/2.4/pages/gelf.html
DEFAULT_CHUNK_SIZE = 1420
DEFAULT_DIAL_TIMEOUT = 15.0


@dataclass(frozen=True)
class SinkConfig:
    graylog_address: str = ""
    app_name: str = "gelf-sink"
    hostname: str = field(default_factory=socket.gethostname)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    compression: str = "gzip"
    compression_level: int = 9
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT

    def __post_init__(self):
        if self.chunk_size <= HEADER_SIZE:
            raise ValueError(
                f"chunk_size must be larger than the {HEADER_SIZE}-byte chunk header, got {self.chunk_size}"
            )
        if self.compression.lower() not in ALGORITHMS:
            raise ValueError(f"Unsupported compression: {self.compression}")

    @property
    def chunk_data_size(self) -> int:
        """Payload bytes that fit in one chunk after the header."""
        return self.chunk_size - HEADER_SIZE


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into a (host, port) tuple. IPv6 hosts may be bracketed."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid address (expected host:port): {address!r}")
    return host.strip("[]"), int(port)


def load_config() -> SinkConfig:
    """Build SinkConfig from environment variables with sensible defaults."""
    return SinkConfig(
        graylog_address=os.environ.get("GRAYLOG_ADDRESS", SinkConfig.graylog_address),
        app_name=os.environ.get("APP_NAME", SinkConfig.app_name),
        hostname=os.environ.get("HOSTNAME") or socket.gethostname(),
        chunk_size=int(os.environ.get("GELF_CHUNK_SIZE", SinkConfig.chunk_size)),
        compression=os.environ.get("GELF_COMPRESSION", SinkConfig.compression),
        compression_level=int(os.environ.get("GELF_COMPRESSION_LEVEL", SinkConfig.compression_level)),
        dial_timeout=float(os.environ.get("GELF_DIAL_TIMEOUT", SinkConfig.dial_timeout)),
    )


def load_config_file(path: str = "config.yml") -> SinkConfig:
    """Load SinkConfig from the ``gelf`` section of a YAML file.

    The path can be overridden via the ``CONFIG_PATH`` environment variable.
    Unknown keys are ignored; missing keys keep their defaults.
    """
    path = os.environ.get("CONFIG_PATH", path)
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    section = raw.get("gelf", {}) or {}
    known = {f.name for f in fields(SinkConfig)}
    return SinkConfig(**{k: v for k, v in section.items() if k in known})


def load_cli_config(argv=None) -> tuple[SinkConfig, argparse.Namespace]:
    """Build SinkConfig from env vars, then override with CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.
    Returns the config and the parsed args (for non-config flags).
    """
    base = load_config()

    parser = argparse.ArgumentParser(description="Ship log lines to a GELF collector over UDP")
    parser.add_argument("--address", type=str, default=None, help="Collector host:port")
    parser.add_argument("--app", type=str, default=None, help="Application name")
    parser.add_argument("--compression", choices=ALGORITHMS, default=None)
    parser.add_argument("--level", type=int, default=None, help="Compression level")
    parser.add_argument("--chunk-size", type=int, default=None, help="Single-datagram size limit")
    parser.add_argument("--file", type=str, default=None, help="Read lines from this file instead of stdin")

    args = parser.parse_args(argv)

    config = replace(
        base,
        graylog_address=args.address if args.address is not None else base.graylog_address,
        app_name=args.app if args.app is not None else base.app_name,
        compression=args.compression if args.compression is not None else base.compression,
        compression_level=args.level if args.level is not None else base.compression_level,
        chunk_size=args.chunk_size if args.chunk_size is not None else base.chunk_size,
    )
    return config, args
