"""
Persistent models backing the help desk request context.

This module provides:
- `EmailAccount`: named sender accounts used for outbound alerts.
- `HelpdeskConfig`: one configuration profile per help desk instance. Rows are
  turned into immutable snapshots by `helpdesk.config.resolve()`; request code
  never reads this model directly.
- `SysLog`: tiered system log entries written by `helpdesk.syslog.SystemLogger`.

Retention
---------
- `SysLog.objects.older_than(months)` selects entries whose `created` timestamp
  plus the grace period is in the past; the purge path deletes that queryset.
"""

from __future__ import annotations

import calendar
from datetime import datetime
from decimal import Decimal

from django.core.mail import EmailMessage
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


def months_before(moment: datetime, months: int) -> datetime:
    """Return `moment` shifted back by whole calendar months (day clamped to month end)."""
    index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class EmailAccount(models.Model):
    """
    A named outbound mail identity.

    Alerts resolve their sender through the configuration: the alert account,
    then the default account, then the bare system mailer.
    """
    name = models.CharField(max_length=100)
    address = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return f"{self.name} <{self.address}>"

    @property
    def from_header(self) -> str:
        return f'"{self.name}" <{self.address}>' if self.name else self.address

    def send(self, to: str, subject: str, body: str) -> int:
        """Send a plain-text message from this account; returns the sent count."""
        message = EmailMessage(subject=subject, body=body, from_email=self.from_header, to=[to])
        return message.send(fail_silently=False)


class HelpdeskConfig(models.Model):
    """
    Configuration profile for a help desk instance.

    Notes:
        - `schema_version` empty/zero marks a legacy schema; those installs keep
          database-backed sessions (see `helpdesk.sessions`).
        - `allowed_filetypes` is a comma-separated extension list (".pdf, .png")
          or the wildcard ".*".
        - `log_level` follows the severity tiers: 1=Error, 2=Warning, 3=Debug.
    """
    title = models.CharField(max_length=200, blank=True, default="")
    schema_version = models.PositiveIntegerField(null=True, blank=True)
    schema_signature = models.CharField(max_length=32, blank=True, default="")
    is_online = models.BooleanField(default=True)

    admin_email = models.EmailField(blank=True, default="")
    alert_email = models.ForeignKey(
        EmailAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    default_email = models.ForeignKey(
        EmailAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    allowed_filetypes = models.CharField(max_length=255, blank=True, default=".doc, .pdf")
    max_file_size = models.PositiveIntegerField(default=1048576)

    log_level = models.PositiveSmallIntegerField(
        default=2,
        validators=[MinValueValidator(1), MaxValueValidator(3)],
    )
    log_grace_period = models.PositiveSmallIntegerField(null=True, blank=True)
    alert_on_sql_error = models.BooleanField(default=True)

    tz_offset = models.DecimalField(max_digits=4, decimal_places=1, default=Decimal("0.0"))
    observe_dst = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "help desk configuration"

    def __str__(self) -> str:
        return self.title or f"Config #{self.pk}"


class LogType(models.TextChoices):
    ERROR = "Error", "Error"
    WARNING = "Warning", "Warning"
    DEBUG = "Debug", "Debug"


class SysLogQuerySet(models.QuerySet):
    def older_than(self, months: int, now: datetime | None = None):
        """Entries whose `created + months` is at or before `now`."""
        now = now or timezone.now()
        return self.filter(created__lte=months_before(now, months))


class SysLog(models.Model):
    """
    One persisted system log entry.

    Rows are append-only: the logger inserts them and the purge path deletes
    them in bulk by age. Nothing updates an existing entry.
    """
    created = models.DateTimeField(default=timezone.now, db_index=True)
    updated = models.DateTimeField(default=timezone.now)
    title = models.CharField(max_length=255)
    log_type = models.CharField(max_length=20, choices=LogType.choices, default=LogType.DEBUG)
    log = models.TextField(blank=True, default="")
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    objects = SysLogQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["log_type", "-created"]),
        ]
        ordering = ("-created",)
        verbose_name = "system log entry"
        verbose_name_plural = "system logs"

    def __str__(self) -> str:  # pragma: no cover (repr aid)
        return f"SysLog<{self.log_type} {self.title!r}>"
