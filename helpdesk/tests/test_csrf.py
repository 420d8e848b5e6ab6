"""
CSRF guard tests.

What these tests verify
-----------------------
- One token per session, generated lazily and stable afterwards.
- `validate()` rejects empty values, tokens from another session and tokens
  of a flushed session; only the exact current token passes.
- `check_request()` accepts the form field first and the `X-CSRFToken` header
  second; a failure writes exactly one Warning entry naming both submitted
  values and the page.
"""

from __future__ import annotations

from django.contrib.sessions.backends.cache import SessionStore
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings

from helpdesk.csrf import TOKEN_NAME, CSRFGuard
from helpdesk.models import SysLog
from helpdesk.syslog import SystemLogger
from helpdesk.tests.helpers import snapshot


class TokenTests(SimpleTestCase):
    def test_token_is_generated_once_per_session(self):
        guard = CSRFGuard(SessionStore())
        first = guard.issue_or_get()
        self.assertTrue(first)
        self.assertEqual(guard.token, first)
        self.assertEqual(guard.session[TOKEN_NAME]["token"], first)

    def test_tokens_differ_between_sessions(self):
        self.assertNotEqual(CSRFGuard(SessionStore()).token, CSRFGuard(SessionStore()).token)

    def test_validate(self):
        guard = CSRFGuard(SessionStore())
        other = CSRFGuard(SessionStore())
        token = guard.token

        self.assertFalse(guard.validate(""))
        self.assertFalse(guard.validate(None))
        self.assertFalse(guard.validate(other.token))
        self.assertFalse(guard.validate(token + "x"))
        self.assertTrue(guard.validate(token))

    def test_validate_rejects_non_ascii_value(self):
        guard = CSRFGuard(SessionStore())
        guard.issue_or_get()
        self.assertFalse(guard.validate("jeton-é"))

    def test_validate_without_issued_token(self):
        self.assertFalse(CSRFGuard(SessionStore()).validate("anything"))

    def test_flushed_session_invalidates_token(self):
        session = SessionStore()
        guard = CSRFGuard(session)
        token = guard.token
        session.flush()
        self.assertFalse(guard.validate(token))

    def test_hidden_field(self):
        guard = CSRFGuard(SessionStore())
        html = guard.render_hidden_field()
        self.assertIn(f'name="{TOKEN_NAME}"', html)
        self.assertIn(f'value="{guard.token}"', html)
        self.assertTrue(html.startswith('<input type="hidden"'))


@override_settings(HELPDESK_SCHEMA_SIGNATURE="")
class CheckRequestTests(TestCase):
    def setUp(self):
        self.rf = RequestFactory()
        self.logger = SystemLogger(snapshot(log_level=2), page="/tickets/new")
        self.guard = CSRFGuard(SessionStore(), logger=self.logger, page="/tickets/new")
        self.token = self.guard.token

    def test_form_field(self):
        request = self.rf.post("/tickets/new", {TOKEN_NAME: self.token})
        self.assertTrue(self.guard.check_request(request))
        self.assertEqual(SysLog.objects.count(), 0)

    def test_custom_field_name(self):
        request = self.rf.post("/tickets/new", {"token": self.token})
        self.assertTrue(self.guard.check_request(request, "token"))

    def test_header(self):
        request = self.rf.post("/tickets/new", {}, HTTP_X_CSRFTOKEN=self.token)
        self.assertTrue(self.guard.check_request(request))

    def test_bad_form_field_falls_through_to_header(self):
        request = self.rf.post("/tickets/new", {TOKEN_NAME: "stale"}, HTTP_X_CSRFTOKEN=self.token)
        self.assertTrue(self.guard.check_request(request))

    def test_missing_token_logs_one_warning(self):
        request = self.rf.post("/tickets/new", {})
        self.assertFalse(self.guard.check_request(request))

        entry = SysLog.objects.get()
        self.assertEqual(entry.log_type, "Warning")
        self.assertEqual(entry.title, f"Invalid CSRF Token {TOKEN_NAME}")
        self.assertEqual(entry.log, "Invalid CSRF token [][] on /tickets/new")

    def test_wrong_values_are_reported(self):
        request = self.rf.post("/tickets/new", {TOKEN_NAME: "bad-form"}, HTTP_X_CSRFTOKEN="bad-header")
        self.assertFalse(self.guard.check_request(request))
        entry = SysLog.objects.get()
        self.assertIn("bad-form", entry.log)
        self.assertIn("bad-header", entry.log)
        self.assertIn("/tickets/new", entry.log)

    def test_non_ascii_values_fail_with_warning(self):
        request = self.rf.post("/tickets/new", {TOKEN_NAME: "ü"}, HTTP_X_CSRFTOKEN="jeton-é")
        self.assertFalse(self.guard.check_request(request))
        entry = SysLog.objects.get()
        self.assertEqual(entry.log_type, "Warning")
        self.assertIn("[ü]", entry.log)
