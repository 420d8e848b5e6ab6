from __future__ import annotations

"""
Attachment validation endpoint.

Overview
--------
- `POST /api/attachments/validate/` with `multipart/form-data`; every part named
  `files` is one candidate.
- The session CSRF token is required (form field `__CSRFToken__` or header
  `X-CSRFToken`); failures answer 403 and are logged as Warning entries.
- Each candidate is annotated by `UploadPolicy.validate_batch()`; the response
  lists every file with its rejection (or null). Nothing is stored: callers
  decide what to keep.
"""

from rest_framework import permissions, status
from rest_framework.parsers import MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import extend_schema

from helpdesk.schema import CSRF_TOKEN_HEADER, ERROR_RESPONSE, UPLOAD_RESULT_RESPONSE
from helpdesk.serializers import UploadCandidateSerializer
from helpdesk.uploads import UploadCandidate


class AttachmentValidateView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_scope = "attachments"
    parser_classes = [MultiPartParser]

    @extend_schema(
        tags=["Attachments"],
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {
                    "files": {"type": "array", "items": {"type": "string", "format": "binary"}},
                },
                "required": ["files"],
            }
        },
        parameters=[CSRF_TOKEN_HEADER],
        responses={200: UPLOAD_RESULT_RESPONSE, 400: UPLOAD_RESULT_RESPONSE, 403: ERROR_RESPONSE, 503: ERROR_RESPONSE},
        description="Validate attachment candidates against the configured type and size policy.",
    )
    def post(self, request: Request) -> Response:
        ctx = getattr(request, "helpdesk", None)
        if ctx is None:
            return Response(
                {"detail": "Help desk configuration is unavailable.", "code": "bootstrap_failed"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if not ctx.check_csrf_token(request):
            return Response(
                {"detail": "Invalid or missing CSRF token.", "code": "csrf_invalid"},
                status=status.HTTP_403_FORBIDDEN,
            )

        uploads = request.FILES.getlist("files")
        if not uploads:
            return Response({"files": ["This field is required."]}, status=status.HTTP_400_BAD_REQUEST)

        candidates = [UploadCandidate.from_upload(upload) for upload in uploads]
        ok = ctx.validate_file_uploads(candidates)
        payload = {"ok": ok, "files": UploadCandidateSerializer(candidates, many=True).data}
        return Response(payload, status=status.HTTP_200_OK if ok else status.HTTP_400_BAD_REQUEST)
