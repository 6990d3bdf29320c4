from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from assessments.eligibility import EligibilityVerdict, evaluate_eligibility
from assessments.models import ExamAttempt
from exams.models import Lesson

from .helpers import make_exam, make_student


class EligibilityTestCase(TestCase):

    def setUp(self):
        self.student = make_student()
        self.now = timezone.now()

    def submitted_attempt(self, exam):
        return ExamAttempt.objects.create(
            student=self.student, exam=exam,
            status=ExamAttempt.Status.SUBMITTED,
            started_at=self.now - timedelta(hours=2),
            submitted_at=self.now - timedelta(hours=1),
        )

    def test_open_exam_with_unlimited_attempts(self):
        verdict = evaluate_eligibility(self.student, make_exam(), now=self.now)

        self.assertTrue(verdict.eligible)
        self.assertTrue(verdict.unlimited_attempts)
        self.assertIsNone(verdict.as_dict()["remaining_attempts"])

    def test_upcoming_exam_carries_start_time(self):
        start = self.now + timedelta(days=1)
        exam = make_exam(start_time=start)

        verdict = evaluate_eligibility(self.student, exam, now=self.now)

        self.assertFalse(verdict.eligible)
        self.assertEqual(verdict.reason, EligibilityVerdict.UPCOMING)
        self.assertEqual(verdict.start_time, start)

    def test_expired_exam(self):
        exam = make_exam(start_time=self.now - timedelta(days=2), end_time=self.now - timedelta(days=1))

        verdict = evaluate_eligibility(self.student, exam, now=self.now)

        self.assertFalse(verdict.eligible)
        self.assertEqual(verdict.reason, EligibilityVerdict.EXPIRED)

    def test_quota_counts_only_submitted_attempts(self):
        exam = make_exam(max_attempts=2)
        self.submitted_attempt(exam)
        ExamAttempt.objects.create(student=self.student, exam=exam, started_at=self.now)

        verdict = evaluate_eligibility(self.student, exam, now=self.now)

        self.assertTrue(verdict.eligible)
        self.assertEqual(verdict.remaining_attempts, 1)

    def test_quota_exhausted(self):
        exam = make_exam(max_attempts=1)
        self.submitted_attempt(exam)

        verdict = evaluate_eligibility(self.student, exam, now=self.now)

        self.assertFalse(verdict.eligible)
        self.assertEqual(verdict.reason, EligibilityVerdict.MAX_ATTEMPTS)
        self.assertIn("1 attempts", verdict.message)

    def test_prerequisite_must_be_submitted(self):
        intro_exam = make_exam(title="Intro quiz")
        exam = make_exam(title="Main exam")
        intro = Lesson.objects.create(title="Lesson 1: Basics", exam=intro_exam)
        Lesson.objects.create(title="Lesson 2", exam=exam, sequential_unlock=True, prerequisite=intro)

        blocked = evaluate_eligibility(self.student, exam, now=self.now)
        self.submitted_attempt(intro_exam)
        unlocked = evaluate_eligibility(self.student, exam, now=self.now)

        self.assertFalse(blocked.eligible)
        self.assertEqual(blocked.reason, EligibilityVerdict.PREREQUISITE)
        self.assertEqual(blocked.prerequisite_title, "Lesson 1: Basics")
        self.assertTrue(unlocked.eligible)

    def test_prerequisite_ignored_without_sequential_unlock(self):
        intro = Lesson.objects.create(title="Lesson 1", exam=make_exam(title="Intro quiz"))
        exam = make_exam()
        Lesson.objects.create(title="Lesson 2", exam=exam, sequential_unlock=False, prerequisite=intro)

        self.assertTrue(evaluate_eligibility(self.student, exam, now=self.now).eligible)

    def test_prerequisite_without_exam_is_ignored(self):
        reading = Lesson.objects.create(title="Reading only")
        exam = make_exam()
        Lesson.objects.create(title="Lesson 2", exam=exam, sequential_unlock=True, prerequisite=reading)

        self.assertTrue(evaluate_eligibility(self.student, exam, now=self.now).eligible)

    def test_self_referencing_prerequisite_is_ignored(self):
        exam = make_exam()
        lesson = Lesson.objects.create(title="Loop", exam=exam, sequential_unlock=True)
        lesson.prerequisite = lesson
        lesson.save()

        self.assertTrue(evaluate_eligibility(self.student, exam, now=self.now).eligible)

    def test_time_window_is_checked_before_quota(self):
        exam = make_exam(max_attempts=1, end_time=self.now - timedelta(minutes=1))
        self.submitted_attempt(exam)

        verdict = evaluate_eligibility(self.student, exam, now=self.now)

        self.assertEqual(verdict.reason, EligibilityVerdict.EXPIRED)
