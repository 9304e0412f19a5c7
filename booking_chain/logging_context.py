"""Request ID logging context and the default decision-trace observer.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, so one availability query or booking commit can be followed
through the resolver modules.

Usage:
    from booking_chain.logging_context import get_request_logger, set_request_id

    set_request_id("REQ-abc123")
    logger = get_request_logger(__name__)
    logger.info("Resolving chain")  # record.request_id == "REQ-abc123"
"""

import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current context."""
    _request_id.set(request_id)


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


LOG_FORMAT = "%(asctime)s [%(request_id)s] [%(name)s] %(levelname)s: %(message)s"


def configure_logging(level: int) -> None:
    """Install the root handler with LOG_FORMAT and request_id on every record."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


@dataclass(frozen=True)
class TraceEvent:
    """One resolver decision, emitted for diagnostics only."""

    name: str
    fields: dict[str, Any] = field(default_factory=dict)


_trace_logger = get_request_logger("booking_chain.trace")


def log_trace(event: TraceEvent) -> None:
    """Default trace observer: write the event to the trace logger at DEBUG."""
    _trace_logger.debug("%s %s", event.name, event.fields)
