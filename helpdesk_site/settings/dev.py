"""
Developer settings (extends base).

Defaults
--------
- DEBUG defaults True (overridable via env).
- Console email backend: admin alerts are printed, not sent.
- SQLite by default unless `DATABASE_URL` is provided.
"""

from .base import *  # noqa

DEBUG = env.bool("DEBUG", True)

# Console email backend for dev
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Verbose system log mirror while developing.
LOGGING["loggers"]["helpdesk"]["level"] = "DEBUG"  # type: ignore[name-defined]
