# core/request_context.py
"""Request id for the current HTTP request, read by the logging filter."""

from __future__ import annotations

import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_REQUEST = "-"
MAX_REQUEST_ID_LENGTH = 64

# Client-supplied ids end up in log lines; keep them to a safe alphabet.
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._:-]")

_current_request_id: ContextVar[str] = ContextVar("delight_request_id", default=NO_REQUEST)


def normalize_request_id(incoming: Optional[str]) -> str:
    cleaned = _UNSAFE_CHARS_RE.sub("", (incoming or "").strip())[:MAX_REQUEST_ID_LENGTH]
    return cleaned or uuid.uuid4().hex


@contextmanager
def request_scope(incoming: Optional[str] = None) -> Iterator[str]:
    """Bind a request id for the duration of the block and yield it."""
    request_id = normalize_request_id(incoming)
    token = _current_request_id.set(request_id)
    try:
        yield request_id
    finally:
        _current_request_id.reset(token)


def current_request_id() -> str:
    return _current_request_id.get()
