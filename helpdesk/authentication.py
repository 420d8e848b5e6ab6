"""
DRF session authentication backed by the help desk CSRF guard.

DRF's `SessionAuthentication` enforces Django's cookie-based CSRF check for
authenticated users. Help desk pages carry the session-scoped `__CSRFToken__`
instead, so unsafe requests are checked with `AppContext.check_csrf_token()`
(form field first, then the `X-CSRFToken` header). Failed checks are recorded
in the system log by the guard itself.
"""

from __future__ import annotations

from rest_framework import exceptions
from rest_framework.authentication import SessionAuthentication
from rest_framework.permissions import SAFE_METHODS


class HelpdeskSessionAuthentication(SessionAuthentication):
    """Session auth whose CSRF check uses the help desk guard when available."""

    def enforce_csrf(self, request):
        ctx = getattr(request._request, "helpdesk", None)
        if ctx is None:
            return super().enforce_csrf(request)
        if request.method in SAFE_METHODS:
            return
        if not ctx.check_csrf_token(request):
            raise exceptions.PermissionDenied("CSRF Failed: invalid or missing token.")
