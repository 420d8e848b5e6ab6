"""WSGI entry point for the help desk site."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "helpdesk_site.settings.dev")

application = get_wsgi_application()
