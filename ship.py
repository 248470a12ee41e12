"""CLI entry point — ships log lines from a file or stdin to a GELF collector."""

import json
import logging
import sys

from gelf_sink.config import load_cli_config
from gelf_sink.handler import GelfHandler, create_logger


def ship(argv=None, stdin=None) -> dict:
    """Ship every non-blank input line and return a summary of what was sent."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    config, args = load_cli_config(argv)
    log = create_logger(config)

    count = 0
    source = open(args.file, "r", encoding="utf-8") if args.file else (stdin or sys.stdin)
    try:
        for line in source:
            line = line.rstrip("\n")
            if not line.strip():
                continue
            log.info(line)
            count += 1
    finally:
        if args.file:
            source.close()

    summary = {"lines": count}
    for handler in list(log.handlers):
        if isinstance(handler, GelfHandler) and handler.writer is not None:
            summary.update(handler.writer.metrics.snapshot())
        log.removeHandler(handler)
        handler.close()

    return summary


def main(argv=None):
    summary = ship(argv)
    print(json.dumps(summary), file=sys.stderr)


if __name__ == "__main__":
    main()
