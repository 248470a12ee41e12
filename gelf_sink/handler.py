"""logging integration — a Handler that ships GELF records through GelfWriter."""

import logging
import sys

from gelf_sink.config import SinkConfig
from gelf_sink.errors import TransportUnavailableError
from gelf_sink.formatter import GelfFormatter
from gelf_sink.writer import GelfWriter

logger = logging.getLogger(__name__)


def _skip_own_records(record: logging.LogRecord) -> bool:
    # The sink logs its own drops; shipping those through itself would recurse.
    return not record.name.startswith("gelf_sink.")


class GelfHandler(logging.Handler):
    """Sends each formatted record as one GELF message.

    Sink errors go through ``handleError`` so a failing collector never
    raises into the application.
    """

    def __init__(self, writer: GelfWriter, level=logging.NOTSET):
        super().__init__(level)
        self.writer = writer
        self.addFilter(_skip_own_records)

    def emit(self, record: logging.LogRecord):
        if self.writer is None:
            return
        try:
            msg = self.format(record)
            self.writer.write(msg.encode("utf-8"))
        except Exception:
            self.handleError(record)

    def close(self):
        self.acquire()
        try:
            if self.writer:
                self.writer.close()
                self.writer = None
        finally:
            self.release()
        super().close()


def build_handler(config: SinkConfig) -> logging.Handler:
    """Return a GelfHandler for *config*, or a stderr handler if the collector is unreachable."""
    formatter = GelfFormatter(config.app_name, config.hostname)

    handler = None
    if config.graylog_address:
        try:
            handler = GelfHandler(GelfWriter(config))
        except TransportUnavailableError as e:
            logger.warning("could not connect with graylog, falling back to stderr: %s", e)

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    return handler


def create_logger(config: SinkConfig, name: str | None = None, level=logging.INFO) -> logging.Logger:
    """Return a logger wired to the collector described by *config*.

    The logger is named after the app unless *name* is given. Handlers
    previously attached to the same logger name are closed and replaced.
    """
    log = logging.getLogger(name or config.app_name)
    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()

    log.addHandler(build_handler(config))
    log.setLevel(level)
    log.propagate = False
    return log
