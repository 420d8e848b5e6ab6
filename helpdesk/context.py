"""
Per-request application context.

`AppContext.start(request, config_id)` is the single bootstrap entry point:

    1) resolve the configuration snapshot (`helpdesk.config.resolve`),
    2) start the session (`helpdesk.sessions.start_session`),
    3) bind the CSRF guard, the upload policy and the system logger.

Bootstrap is all-or-nothing: when the configuration cannot be resolved, or the
resolved id differs from the requested one, `start()` returns None and no
partial context escapes. Session store errors propagate to the caller.

Downstream code reaches the context as `request.helpdesk` (attached by
`core.middleware.AppContextMiddleware`).
"""

from __future__ import annotations

import hashlib
import logging
from typing import Dict, Iterable, Optional

from django.conf import settings
from django.contrib.sessions.backends.base import SessionBase
from django.http import HttpRequest

from helpdesk.config import BootstrapError, ConfigSnapshot, is_upgrade_pending, resolve
from helpdesk.csrf import CSRFGuard
from helpdesk.sessions import start_session
from helpdesk.syslog import SystemLogger
from helpdesk.uploads import UploadCandidate, UploadPolicy

logger = logging.getLogger(__name__)


class AppContext:
    """Configuration, session, CSRF guard, upload policy and logger of one request."""

    def __init__(
        self,
        config: ConfigSnapshot,
        session: SessionBase,
        *,
        ip: Optional[str] = None,
        page: str = "",
    ) -> None:
        self.config = config
        self.session = session
        self.page = page
        self.logger = SystemLogger(config, ip=ip, page=page)
        self.csrf = CSRFGuard(session, logger=self.logger, page=page)
        self.uploads = UploadPolicy(config)
        self._headers: Dict[str, str] = {}

    @classmethod
    def start(
        cls,
        request: HttpRequest,
        config_id,
        *,
        ttl: Optional[int] = None,
    ) -> Optional["AppContext"]:
        """Bootstrap the context for `request`, or return None when it cannot be bound."""
        try:
            config = resolve(config_id)
        except BootstrapError as exc:
            logger.warning("Help desk bootstrap aborted: %s", exc)
            return None

        session_key = request.COOKIES.get(settings.SESSION_COOKIE_NAME)
        session = start_session(config, session_key=session_key, ttl=ttl)
        return cls(
            config,
            session,
            ip=request.META.get("REMOTE_ADDR"),
            page=request.path,
        )

    # ---- configuration & status ------------------------------------------------

    @property
    def config_id(self) -> int:
        return self.config.id if self.config else 0

    @property
    def version(self) -> str:
        return getattr(settings, "HELPDESK_VERSION", "")

    @property
    def db_signature(self) -> str:
        return self.config.schema_signature

    def is_upgrade_pending(self) -> bool:
        return is_upgrade_pending(self.config)

    def is_system_online(self) -> bool:
        """Serving traffic: configuration bound, help desk online, no pending upgrade."""
        return bool(self.config and self.config.is_online and not self.is_upgrade_pending())

    # ---- CSRF -------------------------------------------------------------------

    @property
    def csrf_token(self) -> str:
        return self.csrf.token

    @property
    def csrf_form_input(self) -> str:
        return self.csrf.render_hidden_field()

    def validate_csrf_token(self, token: Optional[str]) -> bool:
        return bool(token) and self.csrf.validate(token)

    def check_csrf_token(self, request: HttpRequest, name: str = "") -> bool:
        return self.csrf.check_request(request, name or None)

    # ---- uploads ----------------------------------------------------------------

    def is_file_type_allowed(self, candidate: UploadCandidate) -> bool:
        return self.uploads.is_file_type_allowed(candidate)

    def validate_file_uploads(self, candidates: Iterable[UploadCandidate]) -> bool:
        return self.uploads.validate_batch(candidates)

    # ---- extra page headers -------------------------------------------------------

    def add_extra_header(self, header: str) -> None:
        """Register a markup fragment for the page head; duplicates collapse."""
        self._headers[hashlib.md5(header.encode("utf-8")).hexdigest()] = header

    @property
    def extra_headers(self) -> list:
        return list(self._headers.values())

    # ---- logging ----------------------------------------------------------------

    def log(self, priority, title: str, message: str, alert: bool = False) -> bool:
        return self.logger.log(priority, title, message, alert=alert)

    def log_debug(self, title: str, message: str, alert: bool = False) -> bool:
        return self.logger.debug(title, message, alert)

    def log_info(self, title: str, message: str, alert: bool = False) -> bool:
        return self.logger.info(title, message, alert)

    def log_warning(self, title: str, message: str, alert: bool = True) -> bool:
        return self.logger.warning(title, message, alert)

    def log_error(self, title: str, message: str, alert: bool = True) -> bool:
        return self.logger.error(title, message, alert)

    def log_db_error(self, title: str, message: str, alert: bool = True) -> bool:
        return self.logger.db_error(title, message, alert)

    def alert_admin(self, subject: str, message: str, log: bool = False) -> None:
        self.logger.alert_admin(subject, message, log=log)

    def purge_logs(self) -> bool:
        return self.logger.purge()
