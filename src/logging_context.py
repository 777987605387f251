"""Sender ID logging context for tracing one conversation across modules.

Every record that reaches the root handler carries the WhatsApp sender id
of the event being processed, making it easy to follow a single customer's
events through ingress, the conversation engine and the dispatcher.

Usage:
    from src.logging_context import get_sender_logger, set_sender_id

    set_sender_id("5565999990000")
    logger = get_sender_logger(__name__)
    logger.info("Processing event")  # ... [5565999990000] [src.x] INFO: Processing event
"""

import logging
from contextvars import ContextVar
from typing import IO, Optional

NO_SENDER = "-"

LOG_FORMAT = "%(asctime)s [%(sender_id)s] [%(name)s] %(levelname)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_sender_id: ContextVar[str] = ContextVar("sender_id", default=NO_SENDER)


def set_sender_id(sender_id: str) -> None:
    """Set the sender id for the current async context."""
    _sender_id.set(sender_id)


def get_sender_id() -> str:
    """Retrieve the current sender id."""
    return _sender_id.get()


class SenderIdFilter(logging.Filter):
    """Injects sender_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.sender_id = get_sender_id()  # type: ignore[attr-defined]
        return True


def build_log_handler(stream: Optional[IO[str]] = None) -> logging.Handler:
    """Stream handler using LOG_FORMAT, with the sender id filter installed.

    The filter sits on the handler so records from every logger, including
    third-party ones, have ``sender_id`` when they are formatted.
    """
    handler = logging.StreamHandler(stream)
    handler.addFilter(SenderIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    return handler


def configure_logging(level: str) -> None:
    """Install the sender-aware handler on the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[build_log_handler()],
    )


def get_sender_logger(name: str) -> logging.Logger:
    """Return a logger with the SenderIdFilter attached.

    Records from this logger carry ``sender_id`` even when they are handled
    somewhere other than the root handler (pytest's caplog, for one).
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SenderIdFilter) for f in logger.filters):
        logger.addFilter(SenderIdFilter())
    return logger
