from datetime import timedelta
from unittest import mock

from django.core.cache import cache
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from assessments.models import ExamAttempt, Response
from exams.models import Exam

from .helpers import make_choice_question, make_exam, make_section, make_student


class AttemptApiTestCase(APITestCase):

    def setUp(self):
        cache.clear()
        self.student = make_student()
        self.exam = make_exam(max_attempts=2)
        self.section = make_section(self.exam)
        self.question, self.options = make_choice_question(self.section, marks="20")
        self.client.force_authenticate(user=self.student)

    def start(self, exam=None):
        return self.client.post(reverse('exams-start', args=[(exam or self.exam).pk]))

    def test_start_then_start_again(self):
        first = self.start()
        second = self.start()

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['id'], second.data['id'])
        self.assertEqual(first.data['remaining_seconds'], 3600)

    def test_start_refused_with_verdict(self):
        upcoming = make_exam(title="Later", start_time=timezone.now() + timedelta(days=1))

        response = self.start(upcoming)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['eligibility']['reason'], 'upcoming')
        self.assertFalse(ExamAttempt.objects.filter(exam=upcoming).exists())

    def test_eligibility_endpoint(self):
        response = self.client.get(reverse('exams-eligibility', args=[self.exam.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['eligible'])
        self.assertEqual(response.data['remaining_attempts'], 2)
        self.assertFalse(response.data['unlimited_attempts'])

    def test_draft_exams_are_invisible_to_students(self):
        draft = make_exam(title="Draft", status=Exam.Status.DRAFT)

        response = self.start(draft)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_save_submit_and_see_result(self):
        attempt_id = self.start().data['id']
        save_url = reverse('attempt-save-response', args=[attempt_id, self.question.pk])

        saved = self.client.put(save_url, {"answer": self.options[0].pk}, format='json')
        self.assertEqual(saved.status_code, status.HTTP_200_OK)
        self.assertEqual(saved.data['answer'], str(self.options[0].pk))

        submitted = self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')
        self.assertEqual(submitted.status_code, status.HTTP_200_OK)
        self.assertEqual(submitted.data['status'], ExamAttempt.Status.SUBMITTED)
        self.assertFalse(submitted.data['already_submitted'])
        self.assertEqual(submitted.data['result']['status'], 'visible')

        result = self.client.get(reverse('attempt-result', args=[attempt_id]))
        self.assertEqual(result.status_code, status.HTTP_200_OK)
        self.assertEqual(result.data['result']['obtained_marks'], '20.00')
        self.assertEqual(result.data['result']['percentage'], '100.00')
        self.assertNotIn('review', result.data)

    def test_save_rejects_wrong_shape(self):
        attempt_id = self.start().data['id']
        save_url = reverse('attempt-save-response', args=[attempt_id, self.question.pk])

        response = self.client.put(save_url, {"answer": [self.options[0].pk]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Response.objects.exists())

    def test_save_after_submit_conflicts(self):
        attempt_id = self.start().data['id']
        self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')

        response = self.client.put(
            reverse('attempt-save-response', args=[attempt_id, self.question.pk]),
            {"answer": self.options[0].pk}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_submit_succeeds_when_settings_are_unreadable(self):
        attempt_id = self.start().data['id']

        with mock.patch('cores.notifications.PlatformSetting.load', side_effect=DatabaseError("db blip")):
            response = self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ExamAttempt.Status.SUBMITTED)
        self.assertEqual(response.data['result']['status'], 'visible')

    def test_review_flag_only(self):
        attempt_id = self.start().data['id']

        response = self.client.put(
            reverse('attempt-save-response', args=[attempt_id, self.question.pk]),
            {"marked_for_review": True}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_marked_for_review'])
        self.assertIsNone(response.data['answer'])

    def test_attempt_list_reports_results(self):
        attempt_id = self.start().data['id']
        self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')

        response = self.client.get(reverse('student-attempts'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data[0]['has_result'])

    def test_double_submit_returns_same_result(self):
        attempt_id = self.start().data['id']
        submit_url = reverse('attempt-submit', args=[attempt_id])

        first = self.client.post(submit_url, {}, format='json')
        second = self.client.post(submit_url, {"auto": True}, format='json')

        self.assertTrue(second.data['already_submitted'])
        self.assertFalse(second.data['auto_submitted'])
        self.assertEqual(first.data['result']['result']['id'], second.data['result']['result']['id'])

    def test_result_hidden_until_release_time(self):
        self.exam.result_visibility = Exam.ResultVisibility.SCHEDULED
        self.exam.result_release_time = timezone.now() + timedelta(days=1)
        self.exam.save()
        attempt_id = self.start().data['id']
        self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')

        response = self.client.get(reverse('attempt-result', args=[attempt_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'hidden')
        self.assertNotIn('result', response.data)

    def test_result_processing_is_accepted(self):
        attempt_id = self.start().data['id']
        with mock.patch('assessments.attempts.score_attempt', side_effect=RuntimeError("grader down")):
            self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')
            response = self.client.get(reverse('attempt-result', args=[attempt_id]))

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(response.data['status'], 'processing')
        self.assertEqual(response.data['poll_limit'], 10)

    def test_result_of_running_attempt(self):
        attempt_id = self.start().data['id']

        response = self.client.get(reverse('attempt-result', args=[attempt_id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_review_shown_when_enabled(self):
        self.exam.show_answers = True
        self.exam.save()
        attempt_id = self.start().data['id']
        self.client.post(reverse('attempt-submit', args=[attempt_id]), {}, format='json')

        response = self.client.get(reverse('attempt-result', args=[attempt_id]))

        review = response.data['review']
        self.assertEqual(len(review), 1)
        self.assertFalse(review[0]['answered'])
        self.assertEqual(review[0]['correct_answer'], [self.options[0].pk])

    def test_resume_returns_saved_answers_and_paper(self):
        attempt_id = self.start().data['id']
        self.client.put(
            reverse('attempt-save-response', args=[attempt_id, self.question.pk]),
            {"answer": self.options[2].pk, "marked_for_review": True}, format='json',
        )

        response = self.client.get(reverse('attempt-detail', args=[attempt_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['expired'])
        self.assertEqual(response.data['responses'][0]['answer'], str(self.options[2].pk))
        self.assertTrue(response.data['responses'][0]['is_marked_for_review'])
        paper_question = response.data['paper']['sections'][0]['questions'][0]
        self.assertNotIn('is_correct', paper_question['options'][0])

    def test_resume_after_time_ran_out(self):
        attempt = ExamAttempt.objects.create(
            student=self.student, exam=self.exam, started_at=timezone.now() - timedelta(minutes=70)
        )

        response = self.client.get(reverse('attempt-detail', args=[attempt.pk]))

        self.assertTrue(response.data['expired'])
        self.assertEqual(response.data['remaining_seconds'], 0)
        self.assertEqual(response.data['status'], ExamAttempt.Status.SUBMITTED)
        self.assertTrue(response.data['auto_submitted'])

    def test_other_students_attempt_is_not_found(self):
        attempt_id = self.start().data['id']
        self.client.force_authenticate(user=make_student(email="other@example.com"))

        response = self.client.get(reverse('attempt-detail', args=[attempt_id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_stats_blocked_for_students(self):
        response = self.client.get(reverse('admin-stats'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
