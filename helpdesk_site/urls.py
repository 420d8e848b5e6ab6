"""
Project URL configuration.

Surfaces
--------
- `/admin/` — Django admin (configuration profiles, sender accounts, logs).
- `/api/system/status/`, `/api/system/csrf/` — bootstrap status and token.
- `/api/attachments/validate/` — attachment policy check.
- `/api/syslogs/` — read-only system logs (staff).
- `/api/schema`, `/api/docs` — OpenAPI schema & UI.
"""

from __future__ import annotations

from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from helpdesk.api import AttachmentValidateView, CsrfTokenView, SysLogViewSet, SystemStatusView

router = DefaultRouter()
router.register(r"syslogs", SysLogViewSet, basename="syslog")

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI / Docs
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    path("api/system/status/", SystemStatusView.as_view(), name="system-status"),
    path("api/system/csrf/", CsrfTokenView.as_view(), name="system-csrf"),
    path("api/attachments/validate/", AttachmentValidateView.as_view(), name="attachments-validate"),

    path("api/", include(router.urls)),
]
