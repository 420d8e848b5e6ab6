# Explicit re-exports for URL configuration:
#   from helpdesk.api import SysLogViewSet, ...

from .system import CsrfTokenView, SystemStatusView
from .syslogs import SysLogViewSet
from .attachments import AttachmentValidateView

__all__ = [
    "CsrfTokenView",
    "SystemStatusView",
    "SysLogViewSet",
    "AttachmentValidateView",
]
