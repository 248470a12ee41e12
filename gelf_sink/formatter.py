"""GELF formatter — builds GELF 1.1 JSON records from logging.LogRecord."""

import json
import logging
import os
import sys

GELF_VERSION = "1.1"

# logging level -> syslog severity
_SYSLOG_LEVELS = {
    logging.CRITICAL: 2,
    logging.ERROR: 3,
    logging.WARNING: 4,
    logging.INFO: 6,
    logging.DEBUG: 7,
}

# LogRecord attributes that are not user-supplied ``extra`` fields
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def syslog_level(levelno: int) -> int:
    """Map a logging level number onto the nearest syslog severity."""
    for threshold in sorted(_SYSLOG_LEVELS, reverse=True):
        if levelno >= threshold:
            return _SYSLOG_LEVELS[threshold]
    return 7


class GelfFormatter(logging.Formatter):
    def __init__(self, app_name: str, hostname: str, extra_fields: dict | None = None):
        super().__init__()
        self._static = {
            "_pid": os.getpid(),
            "_app_name": app_name,
            "_exe": os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "python",
        }
        for key, value in (extra_fields or {}).items():
            self._static[key if key.startswith("_") else f"_{key}"] = value
        self._hostname = hostname

    def build(self, record: logging.LogRecord) -> dict:
        """Return the GELF fields for *record* as a dict."""
        entry = {
            "version": GELF_VERSION,
            "host": self._hostname,
            "short_message": record.getMessage(),
            "timestamp": record.created,
            "level": syslog_level(record.levelno),
            "level_name": record.levelname,
            "_logger": record.name,
        }

        full = []
        if record.exc_info:
            full.append(self.formatException(record.exc_info))
        if record.stack_info:
            full.append(self.formatStack(record.stack_info))
        if full:
            entry["full_message"] = "\n".join(full)

        entry.update(self._static)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            entry[f"_{key}"] = value
        entry.pop("_id", None)  # reserved by GELF
        return entry

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self.build(record), default=str, ensure_ascii=False)
