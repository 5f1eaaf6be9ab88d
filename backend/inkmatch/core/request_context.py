"""
Per-request correlation id.

The HTTP middleware binds one id per request; log records and error envelopes
read it back from here.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import logging
from typing import Iterator, Optional

import ulid

MAX_REQUEST_ID_LENGTH = 64
NO_REQUEST = "no-request"

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Keep a caller-supplied id (trimmed and truncated) or mint a ULID."""
    candidate = (incoming or "").strip()[:MAX_REQUEST_ID_LENGTH]
    return candidate or str(ulid.ULID())


@contextmanager
def bind_request_id(request_id: str) -> Iterator[str]:
    token = _request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        _request_id_var.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id_var.get() or None


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id_var.get() or NO_REQUEST
        return True


def attach_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
