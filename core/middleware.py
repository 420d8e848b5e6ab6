"""
Core middleware: help desk bootstrap and request observability.

Components
----------
- `AppContextMiddleware` (replaces Django's `SessionMiddleware`):
    * Builds one `helpdesk.context.AppContext` per request for
      `settings.HELPDESK_CONFIG_ID` and exposes it as `request.helpdesk`.
    * Uses the session started by the context as `request.session`, so the
      store chosen by the configuration (persistent or ephemeral) is the one
      Django auth and the cookie handling see.
    * When bootstrap fails, `request.helpdesk` is None. With
      `HELPDESK_REQUIRE_CONTEXT=True` the request is answered with a 503 JSON
      error; otherwise Django's default session engine is used.

- `RequestIDLogMiddleware`:
    * Reads `X-Request-ID` (or generates one) and reflects it in the response.
    * Stores the id and the current page in contextvars for
      `core.logging.RequestContextFilter`.
    * Logs one structured line per request including latency (ms).
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from django.conf import settings
from django.contrib.sessions.middleware import SessionMiddleware
from django.http import HttpRequest, HttpResponse, JsonResponse

from helpdesk.context import AppContext

from .logging import page_var, request_id_var

logger = logging.getLogger("helpdesk.request")

# Allow simple, safe request-id tokens coming from clients
_ALLOWED_CHARS = re.compile(r"^[A-Za-z0-9._\-]{1,200}$")


def _coerce_request_id(raw: str | None) -> str:
    """Coerce a client-provided request id to a safe token, or generate a new one."""
    if raw and _ALLOWED_CHARS.match(raw):
        return raw
    return uuid.uuid4().hex


class AppContextMiddleware(SessionMiddleware):
    """Bootstrap the help desk context and bind its session to the request."""

    def process_request(self, request: HttpRequest):
        config_id = getattr(settings, "HELPDESK_CONFIG_ID", 1)
        ctx = AppContext.start(request, config_id)
        request.helpdesk = ctx
        if ctx is not None:
            request.session = ctx.session
            return None

        if getattr(settings, "HELPDESK_REQUIRE_CONTEXT", False):
            return JsonResponse(
                {"detail": "Help desk configuration is unavailable.", "code": "bootstrap_failed"},
                status=503,
            )
        # Keep auth and messages working on an unconfigured install.
        super().process_request(request)
        return None


class RequestIDLogMiddleware:
    """
    - Reads `X-Request-ID` (if provided) or generates one.
    - Adds `request.request_id` and response header `X-Request-ID`.
    - Logs one structured line per request with latency (ms).
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        rid = _coerce_request_id(request.headers.get("X-Request-ID"))
        setattr(request, "request_id", rid)
        request_id_var.set(rid)
        page_var.set(request.path)

        start = time.perf_counter()
        response = self.get_response(request)
        duration_ms = int((time.perf_counter() - start) * 1000)

        response.headers["X-Request-ID"] = rid

        ctx = getattr(request, "helpdesk", None)
        logger.info(
            "request",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.path,
                "status": getattr(response, "status_code", 0),
                "config_id": ctx.config_id if ctx is not None else 0,
                "duration_ms": duration_ms,
            },
        )
        return response
