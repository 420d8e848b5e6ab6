from __future__ import annotations

"""
Configuration binding: resolve a configuration id into an immutable snapshot.

Overview
--------
- `resolve(config_id)` loads the `HelpdeskConfig` row and freezes it into a
  `ConfigSnapshot`. Request-scoped code only ever sees the snapshot, so a single
  snapshot may be shared between concurrent requests.
- Failure is fatal to bootstrap: a zero/empty id or a missing row raises
  `ConfigNotFound`; a row whose id differs from the one requested raises
  `ConfigMismatch`. Both derive from `BootstrapError`.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

from helpdesk.models import HelpdeskConfig


class BootstrapError(Exception):
    """The request context could not be established."""


class ConfigNotFound(BootstrapError, LookupError):
    """No configuration matches the requested identifier."""


class ConfigMismatch(BootstrapError):
    """The loaded configuration does not carry the requested identifier."""


@dataclass(frozen=True)
class ConfigSnapshot:
    """Read-only view of a `HelpdeskConfig` row for the lifetime of a request."""
    id: int
    schema_version: Optional[int]
    schema_signature: str
    is_online: bool
    admin_email: str
    alert_email_id: Optional[int]
    default_email_id: Optional[int]
    allowed_filetypes: str
    max_file_size: int
    log_level: int
    log_grace_period: Optional[int]
    alert_on_sql_error: bool
    tz_offset: Decimal
    observe_dst: bool

    @classmethod
    def from_model(cls, row: HelpdeskConfig) -> "ConfigSnapshot":
        return cls(
            id=row.pk,
            schema_version=row.schema_version,
            schema_signature=row.schema_signature or "",
            is_online=bool(row.is_online),
            admin_email=row.admin_email or "",
            alert_email_id=row.alert_email_id,
            default_email_id=row.default_email_id,
            allowed_filetypes=row.allowed_filetypes or "",
            max_file_size=int(row.max_file_size or 0),
            log_level=int(row.log_level),
            log_grace_period=row.log_grace_period,
            alert_on_sql_error=bool(row.alert_on_sql_error),
            tz_offset=row.tz_offset,
            observe_dst=bool(row.observe_dst),
        )

    @property
    def is_legacy_schema(self) -> bool:
        """True when no schema version is recorded (pre-versioned installs)."""
        return not self.schema_version


def _coerce_id(config_id) -> int:
    try:
        return int(config_id or 0)
    except (TypeError, ValueError):
        return 0


def resolve(config_id) -> ConfigSnapshot:
    """
    Look up configuration `config_id` and return its snapshot.

    Raises:
        ConfigNotFound: `config_id` is zero/empty/non-numeric or no row matches.
        ConfigMismatch: the snapshot's id differs from `config_id`.
    """
    wanted = _coerce_id(config_id)
    if not wanted:
        raise ConfigNotFound(f"Invalid configuration id: {config_id!r}")

    row = HelpdeskConfig.objects.filter(pk=wanted).first()
    if row is None:
        raise ConfigNotFound(f"Configuration {wanted} not found")

    snapshot = ConfigSnapshot.from_model(row)
    if snapshot.id != wanted:
        raise ConfigMismatch(f"Configuration {snapshot.id} returned for {wanted}")
    return snapshot


def is_upgrade_pending(config: Optional[ConfigSnapshot]) -> bool:
    """
    True when the code expects a schema signature the stored data does not carry.

    Compares `settings.HELPDESK_SCHEMA_SIGNATURE` with the snapshot's signature,
    case-insensitively. No expected signature means no upgrade is pending.
    """
    expected = getattr(settings, "HELPDESK_SCHEMA_SIGNATURE", "") or ""
    if not expected:
        return False
    current = config.schema_signature if config is not None else ""
    return current.lower() != expected.lower()
