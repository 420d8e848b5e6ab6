from __future__ import annotations

"""
System endpoints (unauthenticated).

- `GET /api/system/status/`: whether the help desk is serving traffic.
  503 when the request context could not be bootstrapped or the desk is
  offline / waiting for a schema upgrade.
- `GET /api/system/csrf/`: the session's anti-forgery token, its field name and
  the hidden-field markup; the token is also reflected in `X-CSRFToken`.
"""

from rest_framework import permissions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from helpdesk.csrf import TOKEN_HEADER
from helpdesk.schema import ERROR_RESPONSE
from helpdesk.serializers import SystemStatusSerializer


def _unavailable() -> Response:
    return Response(
        {"detail": "Help desk configuration is unavailable.", "code": "bootstrap_failed"},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


class SystemStatusView(APIView):
    """Availability summary for probes and the front end."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="system_status",
        summary="Help desk status",
        responses={200: SystemStatusSerializer, 503: SystemStatusSerializer},
    )
    def get(self, request: Request, *args, **kwargs) -> Response:
        ctx = getattr(request, "helpdesk", None)
        if ctx is None:
            return _unavailable()

        online = ctx.is_system_online()
        payload = SystemStatusSerializer(
            {
                "online": online,
                "upgrade_pending": ctx.is_upgrade_pending(),
                "config_id": ctx.config_id,
                "version": ctx.version,
            }
        ).data
        return Response(payload, status=status.HTTP_200_OK if online else status.HTTP_503_SERVICE_UNAVAILABLE)


class CsrfTokenView(APIView):
    """GET only: issue (or return) the session token."""
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="system_csrf",
        summary="Session CSRF token",
        responses={200: OpenApiResponse(description="Token name, value and hidden field"), 503: ERROR_RESPONSE},
    )
    def get(self, request: Request, *args, **kwargs) -> Response:
        ctx = getattr(request, "helpdesk", None)
        if ctx is None:
            return _unavailable()

        token = ctx.csrf_token
        resp = Response(
            {"name": ctx.csrf.token_name, "token": token, "field": ctx.csrf_form_input},
            status=status.HTTP_200_OK,
        )
        resp[TOKEN_HEADER] = token
        return resp
