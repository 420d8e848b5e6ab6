"""Shared builders for help desk tests."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from helpdesk.config import ConfigSnapshot
from helpdesk.models import HelpdeskConfig

_BASE = ConfigSnapshot(
    id=1,
    schema_version=3,
    schema_signature="",
    is_online=True,
    admin_email="admin@example.com",
    alert_email_id=None,
    default_email_id=None,
    allowed_filetypes=".pdf, .png",
    max_file_size=1024,
    log_level=2,
    log_grace_period=None,
    alert_on_sql_error=True,
    tz_offset=Decimal("0.0"),
    observe_dst=False,
)


def snapshot(**overrides) -> ConfigSnapshot:
    """In-memory configuration snapshot (no database row)."""
    return replace(_BASE, **overrides)


def make_config(**fields) -> HelpdeskConfig:
    """Persisted configuration row with test-friendly defaults."""
    defaults = {
        "title": "Test desk",
        "schema_version": 3,
        "admin_email": "admin@example.com",
        "allowed_filetypes": ".pdf, .png",
        "max_file_size": 1024,
        "log_level": 2,
    }
    defaults.update(fields)
    return HelpdeskConfig.objects.create(**defaults)
