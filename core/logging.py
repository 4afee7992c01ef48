"""Centralized logging for the dashboard backend.

- logging.basicConfig(level=logging.INFO)
- logger name: 'delight'
- every record carries the current request id (see core/request_context.py)
"""

from __future__ import annotations

import logging

from core.request_context import current_request_id


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        return True


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s [rid=%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdFilter())

logger = logging.getLogger("delight")
logger.setLevel(logging.INFO)
