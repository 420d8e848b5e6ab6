"""
Session-scoped anti-forgery tokens.

Overview
--------
- One token per session, stored under a fixed name (`__CSRFToken__`) together
  with its issue time. The token is generated lazily on first use.
- A token validates only against the session that issued it: it lives in that
  session's data, so a token from another session, or from a session that was
  flushed or expired, never matches.
- `check_request()` accepts the token from a form field first and from the
  `X-CSRFToken` header second, so classic form posts and script-driven requests
  share one code path. A failed check records a Warning entry in the system log.

Security
--------
- Tokens come from `secrets.token_urlsafe` and are compared with Django's
  `constant_time_compare`, which also accepts non-ASCII input.
"""

from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING, Optional

from django.contrib.sessions.backends.base import SessionBase
from django.http import HttpRequest
from django.utils.crypto import constant_time_compare
from django.utils.html import format_html

if TYPE_CHECKING:  # pragma: no cover
    from helpdesk.syslog import SystemLogger

TOKEN_NAME = "__CSRFToken__"
TOKEN_HEADER = "X-CSRFToken"


def _new_token() -> str:
    """URL-safe token (~256 bits of entropy)."""
    return secrets.token_urlsafe(32)


class CSRFGuard:
    """Issue, render and validate the anti-forgery token of one session."""

    def __init__(
        self,
        session: SessionBase,
        name: str = TOKEN_NAME,
        logger: Optional["SystemLogger"] = None,
        page: str = "",
    ) -> None:
        self.session = session
        self.name = name
        self.logger = logger
        self.page = page

    @property
    def token_name(self) -> str:
        return self.name

    def issue_or_get(self) -> str:
        """Return the session's token, generating and storing one if absent."""
        stored = self.session.get(self.name)
        if stored and stored.get("token"):
            return stored["token"]
        token = _new_token()
        self.session[self.name] = {"token": token, "time": int(time.time())}
        return token

    @property
    def token(self) -> str:
        return self.issue_or_get()

    def render_hidden_field(self) -> str:
        return format_html('<input type="hidden" name="{}" value="{}" />', self.name, self.token)

    def validate(self, candidate: Optional[str]) -> bool:
        """True iff `candidate` is non-empty and equals this session's token."""
        if not candidate:
            return False
        stored = self.session.get(self.name) or {}
        current = stored.get("token")
        if not current:
            return False
        return constant_time_compare(str(candidate), str(current))

    def check_request(self, request: HttpRequest, field_name: Optional[str] = None) -> bool:
        """
        Validate the token carried by `request`.

        Order: form field `field_name` (default: the token name), then the
        `X-CSRFToken` header. Returns True on the first match. On failure a
        Warning entry with both submitted values and the current page is logged.
        """
        name = field_name or self.name

        posted = request.POST.get(name)
        if posted is not None and self.validate(posted):
            return True

        header = request.headers.get(TOKEN_HEADER)
        if header is not None and self.validate(header):
            return True

        page = self.page or request.path
        message = "Invalid CSRF token [%s][%s] on %s" % (posted or "", header or "", page)
        if self.logger is not None:
            self.logger.warning(f"Invalid CSRF Token {name}", message)
        return False
