"""Logging setup for the route alternatives service."""

from __future__ import annotations

import logging
import sys
from typing import Union

from .tracing import current_trace_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | trace_id=%(trace_id)s | %(message)s"

QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "openai")


class TraceIdFilter(logging.Filter):
    """Stamps each record with the trace id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id()
        return True


def configure_logging(service_name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(TraceIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(service_name)
