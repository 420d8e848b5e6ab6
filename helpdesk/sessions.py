"""
Session bootstrap for the help desk request context.

Decision rule
-------------
- Legacy installs (configuration without a schema version) keep the persistent,
  database-backed session store and an explicit time-to-live.
- Versioned installs use an ephemeral in-process store (cache backend over the
  local-memory cache by default).

Both engines are configurable through settings so deployments can swap the
underlying store without touching this module:
- `HELPDESK_PERSISTENT_SESSION_ENGINE` (default `django.contrib.sessions.backends.db`)
- `HELPDESK_EPHEMERAL_SESSION_ENGINE` (default `django.contrib.sessions.backends.cache`)
- `HELPDESK_SESSION_TTL` seconds (default 86400)

Timezone defaults are copied into the session on every bootstrap; a later login
may overwrite them with the user's own preference.
"""

from __future__ import annotations

from importlib import import_module
from typing import Optional

from django.conf import settings
from django.contrib.sessions.backends.base import SessionBase

from helpdesk.config import ConfigSnapshot

TZ_OFFSET_KEY = "TZ_OFFSET"
TZ_DST_KEY = "TZ_DST"

DEFAULT_PERSISTENT_ENGINE = "django.contrib.sessions.backends.db"
DEFAULT_EPHEMERAL_ENGINE = "django.contrib.sessions.backends.cache"


def _store_class(engine: str):
    return import_module(engine).SessionStore


def start_persistent(session_key: Optional[str], ttl: int) -> SessionBase:
    engine = getattr(settings, "HELPDESK_PERSISTENT_SESSION_ENGINE", DEFAULT_PERSISTENT_ENGINE)
    session = _store_class(engine)(session_key)
    session.set_expiry(ttl)
    return session


def start_ephemeral(session_key: Optional[str]) -> SessionBase:
    engine = getattr(settings, "HELPDESK_EPHEMERAL_SESSION_ENGINE", DEFAULT_EPHEMERAL_ENGINE)
    return _store_class(engine)(session_key)


def start_session(
    config: ConfigSnapshot,
    session_key: Optional[str] = None,
    ttl: Optional[int] = None,
) -> SessionBase:
    """
    Start (or resume) the session for `config` and seed its timezone fields.

    Errors raised by the session store propagate; the caller treats them as a
    failed bootstrap.
    """
    if config.is_legacy_schema:
        if ttl is None:
            ttl = int(getattr(settings, "HELPDESK_SESSION_TTL", 86400))
        session = start_persistent(session_key, ttl)
    else:
        session = start_ephemeral(session_key)

    # Decimal is not JSON-serializable; store the offset as text.
    session[TZ_OFFSET_KEY] = str(config.tz_offset)
    session[TZ_DST_KEY] = bool(config.observe_dst)
    return session
