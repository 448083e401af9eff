"""Request-scoped trace identifiers shared by log records and responses."""

from __future__ import annotations

import re
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping, Optional
from uuid import uuid4

TRACE_HEADERS: tuple[str, ...] = ("x-trace-id", "x-request-id")
RESPONSE_TRACE_HEADER = "X-Trace-Id"

_current_trace: ContextVar[str] = ContextVar("route_trace_id", default="-")
_ACCEPTED_TRACE = re.compile(r"^[0-9a-f-]{8,64}$", re.IGNORECASE)


def new_trace_id() -> str:
    return uuid4().hex


def trace_id_from_headers(headers: Mapping[str, str]) -> str:
    """Reuse a well-formed caller trace id, otherwise start a new one."""

    for name in TRACE_HEADERS:
        value = (headers.get(name) or "").strip()
        if value and _ACCEPTED_TRACE.match(value):
            return value.lower()
    return new_trace_id()


def current_trace_id() -> str:
    return _current_trace.get()


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    token = _current_trace.set(trace_id or new_trace_id())
    try:
        yield _current_trace.get()
    finally:
        _current_trace.reset(token)
