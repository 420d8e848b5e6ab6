"""
drf-spectacular helpers for OpenAPI schema generation.

Purpose
-------
Centralize small, reusable OpenAPI components used across the help desk API:
- The `X-CSRFToken` header accepted by unsafe endpoints.
- Reusable error response shapes (generic error & upload validation result).

Notes
-----
- Imported by the `helpdesk.api` views; keep it free of side effects
  beyond constant definitions.
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, inline_serializer
from rest_framework import serializers

from helpdesk.csrf import TOKEN_HEADER

CSRF_TOKEN_HEADER = OpenApiParameter(
    name=TOKEN_HEADER,
    type=OpenApiTypes.STR,
    location=OpenApiParameter.HEADER,
    required=False,
    description=(
        "Session anti-forgery token (see GET /api/system/csrf/). "
        "May be sent as the `__CSRFToken__` form field instead."
    ),
)

ERROR_RESPONSE = OpenApiResponse(
    response=inline_serializer(
        name="Error",
        fields={
            "detail": serializers.CharField(),
            "code": serializers.CharField(required=False),
        },
    ),
    description="Error response",
)

UPLOAD_RESULT_RESPONSE = OpenApiResponse(
    response=inline_serializer(
        name="UploadValidation",
        fields={
            "ok": serializers.BooleanField(),
            "files": serializers.ListField(child=serializers.DictField()),
        },
    ),
    description="Per-file validation result",
)
