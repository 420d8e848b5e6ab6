"""
Tiered system log with optional administrator alerts.

Severity tiers
--------------
Eight syslog-style priorities collapse into three tiers:

    EMERGENCY, ALERT, CRITICAL, ERROR  -> Error   (1)
    WARNING                            -> Warning (2)
    NOTICE, INFO, DEBUG                -> Debug   (3)

An entry is persisted when the configured `log_level` is at least its tier.
While a schema upgrade is pending every entry is persisted regardless of level.

Alert loops
-----------
`SystemLogger.log()` takes `alert` as a required keyword. The alert path writes
its own audit entry with `alert=False`, so an alert can never trigger another.

Failure policy
--------------
Persisting an entry or sending an alert must never break the request: store and
mail errors are reported on the Python logger and swallowed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import IntEnum
from typing import Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from helpdesk.config import ConfigSnapshot, is_upgrade_pending
from helpdesk.mail import send_alert
from helpdesk.models import SysLog

logger = logging.getLogger(__name__)


class Priority(IntEnum):
    """Syslog priorities (RFC 5424 numeric values)."""
    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


class Severity(IntEnum):
    """Persisted tiers; the value is the minimum `log_level` that keeps the entry."""
    ERROR = 1
    WARNING = 2
    DEBUG = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def logging_level(self) -> int:
        return {
            Severity.ERROR: logging.ERROR,
            Severity.WARNING: logging.WARNING,
            Severity.DEBUG: logging.DEBUG,
        }[self]


_TIERS = {
    Priority.EMERGENCY: Severity.ERROR,
    Priority.ALERT: Severity.ERROR,
    Priority.CRITICAL: Severity.ERROR,
    Priority.ERROR: Severity.ERROR,
    Priority.WARNING: Severity.WARNING,
    Priority.NOTICE: Severity.DEBUG,
    Priority.INFO: Severity.DEBUG,
    Priority.DEBUG: Severity.DEBUG,
}


def severity_for(priority) -> Severity:
    """Map a priority (enum member or raw int) to its tier; unknown values are Debug."""
    try:
        return _TIERS[Priority(priority)]
    except (ValueError, KeyError):
        return Severity.DEBUG


class SystemLogger:
    """
    Per-request writer for `SysLog` entries.

    Args:
        config: Snapshot providing the log level, alert addresses and retention.
        ip: Remote address recorded with each entry.
        page: Current page/route, appended to alert bodies.
    """

    def __init__(self, config: ConfigSnapshot, ip: Optional[str] = None, page: str = "") -> None:
        self.config = config
        self.ip = ip or None
        self.page = page

    # ---- persistence ---------------------------------------------------------

    def log(self, priority, title: str, message: str, *, alert: bool) -> bool:
        """
        Alert (when asked) and persist one entry if the level policy allows it.

        Returns:
            True when the entry was written; False when dropped by policy or when
            the store failed.
        """
        tier = severity_for(priority)

        if alert:
            self.alert_admin(title, message)

        if self.config.log_level < tier and not is_upgrade_pending(self.config):
            return False

        now = timezone.now()
        try:
            with transaction.atomic():
                SysLog.objects.create(
                    created=now,
                    updated=now,
                    title=title,
                    log_type=tier.label,
                    log=message,
                    ip_address=self.ip,
                )
        except DatabaseError:
            logger.exception("Failed to persist system log entry %r", title)
            return False

        logger.log(tier.logging_level, "%s: %s", title, message)
        return True

    def debug(self, title: str, message: str, alert: bool = False) -> bool:
        return self.log(Priority.DEBUG, title, message, alert=alert)

    def info(self, title: str, message: str, alert: bool = False) -> bool:
        return self.log(Priority.INFO, title, message, alert=alert)

    def warning(self, title: str, message: str, alert: bool = True) -> bool:
        return self.log(Priority.WARNING, title, message, alert=alert)

    def error(self, title: str, message: str, alert: bool = True) -> bool:
        return self.log(Priority.ERROR, title, message, alert=alert)

    def db_error(self, title: str, message: str, alert: bool = True) -> bool:
        """Error-tier entry for database failures; alerts only if the config opts in."""
        if alert and not self.config.alert_on_sql_error:
            alert = False
        return self.log(Priority.ERROR, title, message, alert=alert)

    # ---- alerts --------------------------------------------------------------

    def alert_admin(self, subject: str, message: str, log: bool = False) -> None:
        """
        Email the administrator; optionally record the alert as a Critical entry.

        The audit entry is written with `alert=False` so it cannot re-alert.
        """
        body = f"{message}\n\n{self.page}"
        try:
            send_alert(self.config, subject, body)
        except Exception:
            logger.exception("Failed to send admin alert %r", subject)

        if log:
            self.log(Priority.CRITICAL, subject, body, alert=False)

    # ---- retention -----------------------------------------------------------

    def purge(self, now: Optional[datetime] = None) -> bool:
        """
        Delete entries older than the configured grace period (in months).

        Returns False without touching the store when no positive numeric grace
        period is configured.
        """
        try:
            months = int(self.config.log_grace_period)
        except (TypeError, ValueError):
            return False
        if months <= 0:
            return False

        deleted, _ = SysLog.objects.older_than(months, now=now).delete()
        logger.info("Purged %d system log entries older than %d month(s)", deleted, months)
        return True
