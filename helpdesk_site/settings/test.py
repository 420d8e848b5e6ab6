"""
Test settings (extends base).

- In-memory SQLite and local-memory cache; locmem email backend so tests can
  inspect `django.core.mail.outbox`.
- Fast password hashing; no expected schema signature unless a test overrides it.
"""

from .base import *  # noqa

DEBUG = False

DATABASES = {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}}
CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "helpdesk-tests"}}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

HELPDESK_SCHEMA_SIGNATURE = ""
HELPDESK_REQUIRE_CONTEXT = False
