"""Log sink wiring for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOGGER_NAME = "mc_routines"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a rich console handler to the package logger once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(rich_tracebacks=False, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s %(extra_payload)s"))
        handler.addFilter(_ExtraPayloadFilter())
        logger.addHandler(handler)
    logger.propagate = False
    return logger


_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "extra_payload"}


class _ExtraPayloadFilter(logging.Filter):
    """Renders structured ``extra`` fields after the event name."""

    def filter(self, record: logging.LogRecord) -> bool:
        payload = {key: value for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS}
        record.extra_payload = payload if payload else ""
        return True
