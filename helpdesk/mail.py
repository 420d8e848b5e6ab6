"""
Outbound mail helpers for administrator alerts.

Sender resolution
-----------------
1. The configuration's alert account (`alert_email_id`).
2. The configuration's default account (`default_email_id`).
3. The bare system mailer (`send_raw`) with a synthetic From header.

Recipient resolution
--------------------
1. The configuration's admin address.
2. `settings.HELPDESK_ADMIN_EMAIL`.
"""

from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.mail import EmailMessage

from helpdesk.config import ConfigSnapshot
from helpdesk.models import EmailAccount

ALERTS_SENDER_NAME = "Helpdesk Alerts"


def resolve_recipient(config: ConfigSnapshot) -> str:
    return config.admin_email or getattr(settings, "HELPDESK_ADMIN_EMAIL", "")


def _account(account_id: Optional[int]) -> Optional[EmailAccount]:
    if not account_id:
        return None
    return EmailAccount.objects.filter(pk=account_id).first()


def resolve_sender(config: ConfigSnapshot) -> Optional[EmailAccount]:
    """Alert account, else default account, else None (system mailer)."""
    return _account(config.alert_email_id) or _account(config.default_email_id)


def send_raw(to: str, subject: str, body: str, from_header: str) -> int:
    """Send through the project's mail backend with an explicit From header."""
    message = EmailMessage(subject=subject, body=body, from_email=from_header, to=[to])
    return message.send(fail_silently=False)


def send_alert(config: ConfigSnapshot, subject: str, body: str) -> int:
    to = resolve_recipient(config)
    account = resolve_sender(config)
    if account is not None:
        return account.send(to, subject, body)
    # no account configured; fall back to the system mailer
    return send_raw(to, subject, body, f'"{ALERTS_SENDER_NAME}" <{to}>')
