from __future__ import annotations

"""
Purge system log entries past the configured retention period.

Overview
--------
- Resolves the configuration (`--config`, default `HELPDESK_CONFIG_ID`) and
  deletes `SysLog` rows older than its `log_grace_period` months.
- A configuration without a positive grace period leaves the table untouched.
- Safe to run as a cron/periodic job.

Usage
-----
    python manage.py purge_syslogs --config 1
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from helpdesk.config import BootstrapError, resolve
from helpdesk.models import SysLog
from helpdesk.syslog import SystemLogger


class Command(BaseCommand):
    help = "Delete system log entries older than the configured grace period."

    def add_arguments(self, parser):
        parser.add_argument(
            "--config",
            type=int,
            default=None,
            help="Configuration id (default: HELPDESK_CONFIG_ID).",
        )

    def handle(self, *args, **options):
        config_id = options["config"]
        if config_id is None:
            config_id = getattr(settings, "HELPDESK_CONFIG_ID", 1)
        try:
            config = resolve(config_id)
        except BootstrapError as exc:
            raise CommandError(str(exc)) from exc

        before = SysLog.objects.count()
        if not SystemLogger(config).purge():
            self.stdout.write(self.style.WARNING("No log retention period configured; nothing purged."))
            return

        deleted = before - SysLog.objects.count()
        self.stdout.write(
            self.style.SUCCESS(f"Deleted {deleted} system log entries older than {config.log_grace_period} month(s).")
        )
