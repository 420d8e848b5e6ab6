"""
Logging helpers for request-scoped correlation.

Overview
--------
- Exposes `contextvars.ContextVar`s holding the current request id and page
  (path) for the lifetime of the request; both are set by middleware.
- Provides `RequestContextFilter`, a `logging.Filter` that injects `request_id`
  and `page` onto every `LogRecord` so formatters using `%(request_id)s` or
  `%(page)s` never break, even when the line originates outside an HTTP request
  (e.g., the `purge_syslogs` management command). A dash `"-"` is used when no
  value is present.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
page_var: ContextVar[str] = ContextVar("page", default="-")


class RequestContextFilter(logging.Filter):
    """Ensure `%(request_id)s` and `%(page)s` are present on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        if not hasattr(record, "page"):
            record.page = page_var.get()
        return True
