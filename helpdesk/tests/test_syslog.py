"""
System logger tests: severity tiers, level policy, alerts and retention.

What these tests verify
-----------------------
- The priority -> tier mapping is total: Emergency..Error are Error, Warning is
  Warning, Notice/Info/Debug are Debug.
- Entries below the configured level are dropped unless a schema upgrade is
  pending, in which case everything is persisted.
- `alert=True` sends exactly one mail and writes exactly one entry; the alert
  path's own audit entry is written with `alert=False`.
- Sender/recipient fallbacks and failure swallowing for mail and store errors.
- Age-based purge honors the grace period in calendar months.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import ANY, patch

from django.core import mail
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from helpdesk.models import EmailAccount, HelpdeskConfig, LogType, SysLog, months_before
from helpdesk.syslog import Priority, Severity, SystemLogger, severity_for
from helpdesk.tests.helpers import snapshot


class SeverityMappingTests(SimpleTestCase):
    def test_error_tier(self):
        for p in (Priority.EMERGENCY, Priority.ALERT, Priority.CRITICAL, Priority.ERROR):
            self.assertEqual(severity_for(p), Severity.ERROR, p)

    def test_warning_tier(self):
        self.assertEqual(severity_for(Priority.WARNING), Severity.WARNING)

    def test_debug_tier(self):
        for p in (Priority.NOTICE, Priority.INFO, Priority.DEBUG):
            self.assertEqual(severity_for(p), Severity.DEBUG, p)

    def test_mapping_is_total(self):
        # Raw ints are accepted; anything outside the enum falls to Debug.
        for p in Priority:
            self.assertIn(severity_for(int(p)), set(Severity))
        self.assertEqual(severity_for(42), Severity.DEBUG)

    def test_labels(self):
        self.assertEqual([s.label for s in Severity], ["Error", "Warning", "Debug"])


@override_settings(HELPDESK_ADMIN_EMAIL="fallback@example.com", HELPDESK_SCHEMA_SIGNATURE="")
class LevelPolicyTests(TestCase):
    def test_level_one_drops_warning(self):
        logger = SystemLogger(snapshot(log_level=1))
        self.assertFalse(logger.warning("Disk", "almost full", alert=False))
        self.assertEqual(SysLog.objects.count(), 0)

    def test_level_one_drops_warning_but_still_alerts(self):
        # Alerting happens before the persistence decision.
        logger = SystemLogger(snapshot(log_level=1))
        self.assertFalse(logger.warning("Disk", "almost full"))
        self.assertEqual(SysLog.objects.count(), 0)
        self.assertEqual(len(mail.outbox), 1)

    def test_level_one_keeps_error(self):
        logger = SystemLogger(snapshot(log_level=1), ip="10.0.0.5")
        self.assertTrue(logger.error("DB", "connection lost", alert=False))
        entry = SysLog.objects.get()
        self.assertEqual(entry.log_type, LogType.ERROR)
        self.assertEqual(entry.title, "DB")
        self.assertEqual(entry.log, "connection lost")
        self.assertEqual(entry.ip_address, "10.0.0.5")

    def test_debug_level_keeps_everything(self):
        logger = SystemLogger(snapshot(log_level=3))
        self.assertTrue(logger.debug("a", "1"))
        self.assertTrue(logger.info("b", "2"))
        self.assertEqual(
            sorted(SysLog.objects.values_list("log_type", flat=True)),
            ["Debug", "Debug"],
        )

    @override_settings(HELPDESK_SCHEMA_SIGNATURE="abc123")
    def test_pending_upgrade_persists_below_level(self):
        logger = SystemLogger(snapshot(log_level=1, schema_signature="old999"))
        self.assertTrue(logger.debug("Upgrade", "step 1"))
        self.assertEqual(SysLog.objects.get().log_type, "Debug")

    @override_settings(HELPDESK_SCHEMA_SIGNATURE="ABC123")
    def test_signature_comparison_ignores_case(self):
        logger = SystemLogger(snapshot(log_level=1, schema_signature="abc123"))
        self.assertFalse(logger.debug("Quiet", "dropped"))

    def test_store_failure_is_swallowed(self):
        logger = SystemLogger(snapshot(log_level=3))
        with patch("helpdesk.syslog.SysLog.objects.create", side_effect=DatabaseError("gone")):
            with self.assertLogs("helpdesk.syslog", level="ERROR"):
                self.assertFalse(logger.error("x", "y", alert=False))

    def test_store_failure_leaves_transaction_usable(self):
        logger = SystemLogger(snapshot(log_level=3))
        with self.assertLogs("helpdesk.syslog", level="ERROR"):
            self.assertFalse(logger.error(None, "missing title", alert=False))
        self.assertEqual(HelpdeskConfig.objects.count(), 0)
        self.assertEqual(SysLog.objects.count(), 0)


@override_settings(HELPDESK_ADMIN_EMAIL="fallback@example.com", HELPDESK_SCHEMA_SIGNATURE="")
class AlertTests(TestCase):
    def test_log_with_alert_sends_once_and_writes_once(self):
        logger = SystemLogger(snapshot(log_level=2), page="/scp/tickets.php")
        with patch.object(logger, "alert_admin", wraps=logger.alert_admin) as spy:
            self.assertTrue(logger.log(Priority.WARNING, "Quota", "over quota", alert=True))
        spy.assert_called_once_with("Quota", "over quota")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(SysLog.objects.count(), 1)

    def test_alert_audit_entry_does_not_realert(self):
        logger = SystemLogger(snapshot(log_level=1), page="/p")
        with patch.object(logger, "log", wraps=logger.log) as spy:
            logger.alert_admin("Outage", "mail queue stuck", log=True)
        spy.assert_called_once_with(Priority.CRITICAL, "Outage", ANY, alert=False)
        self.assertEqual(len(mail.outbox), 1)
        entry = SysLog.objects.get()
        self.assertEqual(entry.log_type, "Error")

    def test_alert_appends_page_and_uses_admin_address(self):
        SystemLogger(snapshot(admin_email="boss@example.com"), page="/scp/settings.php").alert_admin("S", "body")
        msg = mail.outbox[0]
        self.assertEqual(msg.to, ["boss@example.com"])
        self.assertEqual(msg.subject, "S")
        self.assertEqual(msg.body, "body\n\n/scp/settings.php")

    def test_recipient_falls_back_to_system_admin(self):
        SystemLogger(snapshot(admin_email="")).alert_admin("S", "b")
        self.assertEqual(mail.outbox[0].to, ["fallback@example.com"])

    def test_sender_prefers_alert_account(self):
        alerts = EmailAccount.objects.create(name="Alerts", address="alerts@example.com")
        default = EmailAccount.objects.create(name="Support", address="support@example.com")
        cfg = snapshot(alert_email_id=alerts.pk, default_email_id=default.pk)
        SystemLogger(cfg).alert_admin("S", "b")
        self.assertEqual(mail.outbox[0].from_email, '"Alerts" <alerts@example.com>')

    def test_sender_falls_back_to_default_account(self):
        default = EmailAccount.objects.create(name="Support", address="support@example.com")
        SystemLogger(snapshot(default_email_id=default.pk)).alert_admin("S", "b")
        self.assertEqual(mail.outbox[0].from_email, '"Support" <support@example.com>')

    def test_sender_falls_back_to_system_mailer(self):
        SystemLogger(snapshot(admin_email="boss@example.com")).alert_admin("S", "b")
        self.assertEqual(mail.outbox[0].from_email, '"Helpdesk Alerts" <boss@example.com>')

    def test_mail_failure_does_not_block_logging(self):
        logger = SystemLogger(snapshot(log_level=2))
        with patch("helpdesk.syslog.send_alert", side_effect=OSError("smtp down")):
            with self.assertLogs("helpdesk.syslog", level="ERROR"):
                self.assertTrue(logger.error("Boom", "details"))
        self.assertEqual(SysLog.objects.count(), 1)

    def test_db_error_alert_follows_config(self):
        SystemLogger(snapshot(alert_on_sql_error=False)).db_error("SQL", "syntax error")
        self.assertEqual(len(mail.outbox), 0)
        SystemLogger(snapshot(alert_on_sql_error=True)).db_error("SQL", "syntax error")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(SysLog.objects.filter(log_type="Error").count(), 2)


class PurgeTests(TestCase):
    def setUp(self):
        self.now = timezone.now()

    def _entry(self, created):
        return SysLog.objects.create(title="t", log_type="Debug", log="", created=created, updated=created)

    def test_without_grace_period_is_noop(self):
        self._entry(self.now - timedelta(days=900))
        self.assertFalse(SystemLogger(snapshot(log_grace_period=None)).purge(now=self.now))
        self.assertFalse(SystemLogger(snapshot(log_grace_period=0)).purge(now=self.now))
        self.assertEqual(SysLog.objects.count(), 1)

    def test_deletes_entries_past_grace_period(self):
        old = self._entry(months_before(self.now, 3))
        edge = self._entry(months_before(self.now, 2))
        recent = self._entry(self.now - timedelta(days=10))

        self.assertTrue(SystemLogger(snapshot(log_grace_period=2)).purge(now=self.now))

        remaining = set(SysLog.objects.values_list("pk", flat=True))
        self.assertEqual(remaining, {recent.pk})
        self.assertNotIn(old.pk, remaining)
        self.assertNotIn(edge.pk, remaining)


class MonthsBeforeTests(SimpleTestCase):
    def test_clamps_to_month_end(self):
        moment = datetime(2023, 3, 31, 12, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(months_before(moment, 1), datetime(2023, 2, 28, 12, 0, tzinfo=dt_timezone.utc))

    def test_crosses_year_boundary(self):
        moment = datetime(2024, 1, 15, tzinfo=dt_timezone.utc)
        self.assertEqual(months_before(moment, 2), datetime(2023, 11, 15, tzinfo=dt_timezone.utc))
