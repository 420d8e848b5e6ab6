"""
Base Django settings for the help desk site.

Layout
------
- Split settings: `base.py` (shared), `dev.py` (developer overrides), `prod.py`
  (hardened), `test.py` (test runner).
- `environ` is used to source configuration; a local `.env` is optional in dev.

Request context
---------------
- `core.middleware.AppContextMiddleware` takes the place of Django's
  `SessionMiddleware`: it bootstraps `request.helpdesk` for
  `HELPDESK_CONFIG_ID` and uses the session store the configuration selects.
- Anti-forgery tokens are issued per session by `helpdesk.csrf.CSRFGuard`;
  DRF session auth validates them through `HelpdeskSessionAuthentication`.

Observability
-------------
- `core.middleware.RequestIDLogMiddleware` logs a single structured line per
  request. `core.logging.RequestContextFilter` adds `request_id` and `page` to
  every record.
"""

from pathlib import Path
import environ

# ---------------------------------------------------------------------
# Paths & Env
# ---------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env = environ.Env(DEBUG=(bool, False))
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(str(env_file))

# ---------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------
SECRET_KEY = env("SECRET_KEY", default="dev-insecure-change-me")
DEBUG = env.bool("DEBUG", False)

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["127.0.0.1", "localhost"])

# ---------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------
INSTALLED_APPS = [
    # Django apps
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "django_filters",
    "drf_spectacular",

    # Local apps
    "core",
    "helpdesk",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    # Bootstraps request.helpdesk and request.session (replaces SessionMiddleware)
    "core.middleware.AppContextMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Observability: request-id + structured request log (one line per request)
    "core.middleware.RequestIDLogMiddleware",
]

ROOT_URLCONF = "helpdesk_site.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "helpdesk_site.wsgi.application"

# ---------------------------------------------------------------------
# Database & cache
# ---------------------------------------------------------------------
DATABASES = {
    "default": env.db(
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
    )
}

# The ephemeral session engine stores sessions in this cache.
CACHES = {
    "default": env.cache("CACHE_URL", default="locmemcache://helpdesk"),
}

# ---------------------------------------------------------------------
# Internationalization
# ---------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------------------------------------------------------
# Email (alerts)
# ---------------------------------------------------------------------
EMAIL_BACKEND = env("EMAIL_BACKEND", default="django.core.mail.backends.smtp.EmailBackend")
DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL", default="helpdesk@localhost")

# ---------------------------------------------------------------------
# Help desk request context
# ---------------------------------------------------------------------
HELPDESK_VERSION = "1.0.0"
# Configuration profile bound to every request.
HELPDESK_CONFIG_ID = env.int("HELPDESK_CONFIG_ID", default=1)
# Schema signature expected by this code; a mismatch with the stored
# configuration flags a pending upgrade (verbose logging, system offline).
HELPDESK_SCHEMA_SIGNATURE = env("HELPDESK_SCHEMA_SIGNATURE", default="")
# Alert recipient when the configuration has no admin address.
HELPDESK_ADMIN_EMAIL = env("HELPDESK_ADMIN_EMAIL", default="admin@localhost")
# Lifetime (seconds) of persistent sessions used by legacy-schema configurations.
HELPDESK_SESSION_TTL = env.int("HELPDESK_SESSION_TTL", default=86400)
HELPDESK_PERSISTENT_SESSION_ENGINE = "django.contrib.sessions.backends.db"
HELPDESK_EPHEMERAL_SESSION_ENGINE = "django.contrib.sessions.backends.cache"
# Answer 503 instead of falling back to the default session when bootstrap fails.
HELPDESK_REQUIRE_CONTEXT = env.bool("HELPDESK_REQUIRE_CONTEXT", False)

# ---------------------------------------------------------------------
# DRF & API Schema
# ---------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "helpdesk.authentication.HelpdeskSessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
        "rest_framework.filters.SearchFilter",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 25,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
        "rest_framework.throttling.ScopedRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "user": env("DRF_THROTTLE_RATE_USER", default="200/min"),
        "anon": env("DRF_THROTTLE_RATE_ANON", default="50/min"),
        "syslogs-read": env("DRF_THROTTLE_RATE_SYSLOGS_READ", default="60/min"),
        "attachments": env("DRF_THROTTLE_RATE_ATTACHMENTS", default="30/min"),
    },
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Help Desk API",
    "DESCRIPTION": "Request context, attachment policy and system logs.",
    "VERSION": HELPDESK_VERSION,
    "SERVE_INCLUDE_SCHEMA": False,
    "LICENSE": {"name": "MIT"},
}

# ---------------------------------------------------------------------
# Security defaults (safe baseline; prod hardening in prod.py)
# ---------------------------------------------------------------------
SESSION_COOKIE_SAMESITE = "Lax"
X_FRAME_OPTIONS = "DENY"

# ---------------------------------------------------------------------
# Logging (observability)
# ---------------------------------------------------------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_context": {"()": "core.logging.RequestContextFilter"},
    },
    "formatters": {
        "structured": {
            "format": "level=%(levelname)s logger=%(name)s request_id=%(request_id)s "
                      "page=%(page)s message=%(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_context"],
            "formatter": "structured",
        },
    },
    "loggers": {
        # The middleware logs one line per request to this logger.
        "helpdesk.request": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        # Mirror of persisted system log entries and side-channel failures.
        "helpdesk": {
            "handlers": ["console"],
            "level": env("HELPDESK_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
    },
}
