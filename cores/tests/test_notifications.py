from unittest import mock

import requests
from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase

from assessments.tests.helpers import make_exam, make_student
from assessments.models import ExamAttempt
from cores.models import AuditLog, PlatformSetting
from cores.notifications import notify_completion, post_webhook, record_event


class NotificationTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.student = make_student()
        self.exam = make_exam()
        self.attempt = ExamAttempt.objects.create(
            student=self.student, exam=self.exam, status=ExamAttempt.Status.SUBMITTED, auto_submitted=True
        )

    def test_record_event(self):
        record_event(self.student, 'START', self.attempt, details="hello")

        log = AuditLog.objects.get()
        self.assertEqual(log.target_model, "ExamAttempt")
        self.assertEqual(log.target_object_id, str(self.attempt.pk))

    def test_auto_submit_is_logged_without_webhook(self):
        with mock.patch('cores.notifications.requests.post') as post:
            notify_completion(self.attempt)

        post.assert_not_called()
        self.assertEqual(AuditLog.objects.get().action, 'AUTO_SUBMIT')

    def test_webhook_receives_payload(self):
        settings = PlatformSetting.load()
        settings.completion_webhook_url = "https://hooks.example.com/done"
        settings.save()

        with mock.patch('cores.notifications.requests.post') as post:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                notify_completion(self.attempt)

        self.assertEqual(len(callbacks), 1)
        url = post.call_args.args[0]
        payload = post.call_args.kwargs['json']
        self.assertEqual(url, "https://hooks.example.com/done")
        self.assertEqual(payload['attempt_id'], self.attempt.pk)
        self.assertFalse(payload['result_ready'])

    def test_webhook_waits_for_commit(self):
        settings = PlatformSetting.load()
        settings.completion_webhook_url = "https://hooks.example.com/done"
        settings.save()

        with mock.patch('cores.notifications.requests.post') as post:
            with self.captureOnCommitCallbacks(execute=False):
                notify_completion(self.attempt)

        post.assert_not_called()

    def test_settings_outage_skips_webhook(self):
        with mock.patch('cores.notifications.PlatformSetting.load', side_effect=DatabaseError("db down")):
            with mock.patch('cores.notifications.requests.post') as post:
                notify_completion(self.attempt)

        post.assert_not_called()
        self.assertEqual(AuditLog.objects.get().action, 'AUTO_SUBMIT')

    def test_unreachable_webhook_is_swallowed(self):
        with mock.patch('cores.notifications.requests.post', side_effect=requests.exceptions.ConnectionError):
            self.assertFalse(post_webhook("https://hooks.example.com/done", {}))

    def test_http_error_is_a_failure(self):
        response = mock.Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        with mock.patch('cores.notifications.requests.post', return_value=response):
            self.assertFalse(post_webhook("https://hooks.example.com/done", {}))


class PlatformSettingTestCase(TestCase):

    def setUp(self):
        cache.clear()

    def test_singleton(self):
        first = PlatformSetting.load()
        first.max_grading_retries = 5
        first.save()
        PlatformSetting(site_name="Another").save()

        self.assertEqual(PlatformSetting.objects.count(), 1)
        self.assertEqual(PlatformSetting.load().site_name, "Another")
