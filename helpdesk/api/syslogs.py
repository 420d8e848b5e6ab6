from __future__ import annotations

from django.utils.dateparse import parse_datetime
from django.utils.timezone import is_naive, make_aware
from rest_framework import filters, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from helpdesk.models import SysLog
from helpdesk.schema import CSRF_TOKEN_HEADER, ERROR_RESPONSE
from helpdesk.serializers import SysLogSerializer


@extend_schema(
    tags=["System logs"],
    parameters=[
        OpenApiParameter(name="log_type", type=OpenApiTypes.STR, required=False, description="Error|Warning|Debug"),
        OpenApiParameter(name="date_from", type=OpenApiTypes.DATETIME, required=False),
        OpenApiParameter(name="date_to", type=OpenApiTypes.DATETIME, required=False),
    ],
    responses={200: OpenApiResponse(description="Paginated system logs"), 403: ERROR_RESPONSE},
    description="Read-only system log entries (staff only).",
)
class SysLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only system logs for staff.

    Filters (query params):
      - log_type: Error|Warning|Debug
      - search: matches title or message
      - date_from, date_to: ISO8601 datetimes (inclusive)
    """

    queryset = SysLog.objects.all()
    serializer_class = SysLogSerializer
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "syslogs-read"
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["log_type"]
    search_fields = ["title", "log"]
    ordering_fields = ["created", "log_type"]

    lookup_value_regex = r"\d+"

    def _parse_dt(self, s: str | None):
        if not s:
            return None
        dt = parse_datetime(s)
        if dt and is_naive(dt):
            dt = make_aware(dt)
        return dt

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        params = self.request.query_params
        df = self._parse_dt(params.get("date_from"))
        dt = self._parse_dt(params.get("date_to"))
        if df:
            queryset = queryset.filter(created__gte=df)
        if dt:
            queryset = queryset.filter(created__lte=dt)
        return queryset

    @extend_schema(
        operation_id="syslogs_purge",
        summary="Purge entries past the retention period",
        request=None,
        parameters=[CSRF_TOKEN_HEADER],
        responses={200: OpenApiResponse(description='{"purged": true|false}'), 503: ERROR_RESPONSE},
    )
    @action(detail=False, methods=["post"])
    def purge(self, request: Request) -> Response:
        ctx = getattr(request, "helpdesk", None)
        if ctx is None:
            return Response(
                {"detail": "Help desk configuration is unavailable.", "code": "bootstrap_failed"},
                status=503,
            )
        return Response({"purged": ctx.purge_logs()})
