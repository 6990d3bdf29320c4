# assessments/eligibility.py
import math
from dataclasses import dataclass

from django.utils import timezone

from exams.models import Lesson

from .models import ExamAttempt


@dataclass
class EligibilityVerdict:
    eligible: bool
    reason: str = "accessible"
    message: str = ""
    remaining_attempts: float = math.inf
    start_time: object = None
    end_time: object = None
    prerequisite_title: str = None

    UPCOMING = "upcoming"
    EXPIRED = "expired"
    PREREQUISITE = "prerequisite"
    MAX_ATTEMPTS = "max_attempts"
    ACCESSIBLE = "accessible"

    @property
    def unlimited_attempts(self):
        return self.remaining_attempts == math.inf

    def as_dict(self):
        return {
            "eligible": self.eligible,
            "reason": self.reason,
            "message": self.message,
            # JSON has no infinity
            "remaining_attempts": None if self.unlimited_attempts else int(self.remaining_attempts),
            "unlimited_attempts": self.unlimited_attempts,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "prerequisite_title": self.prerequisite_title,
        }


def submitted_attempt_count(student, exam):
    return ExamAttempt.objects.filter(
        student=student, exam=exam, status=ExamAttempt.Status.SUBMITTED
    ).count()


def _prerequisite_exam(exam):
    """The exam a student has to submit before this one, if any."""
    lesson = Lesson.objects.select_related('prerequisite__exam').filter(exam=exam).first()
    if lesson is None or not lesson.sequential_unlock:
        return None, None

    prerequisite = lesson.prerequisite
    if prerequisite is None or prerequisite.pk == lesson.pk:
        return None, None
    # A prerequisite pointing back at the same exam is a misconfiguration, ignore it
    if prerequisite.exam_id is None or prerequisite.exam_id == exam.pk:
        return None, None
    return prerequisite, prerequisite.exam


def evaluate_eligibility(student, exam, now=None):
    """
    Decide whether `student` may start a fresh attempt at `exam`.

    Checks run in order and stop at the first failure: time window,
    prerequisite lesson, attempt quota. Nothing is written.
    """
    now = now or timezone.now()

    if exam.start_time and now < exam.start_time:
        return EligibilityVerdict(
            eligible=False,
            reason=EligibilityVerdict.UPCOMING,
            message="This exam has not started yet.",
            start_time=exam.start_time,
            end_time=exam.end_time,
        )
    if exam.end_time and now > exam.end_time:
        return EligibilityVerdict(
            eligible=False,
            reason=EligibilityVerdict.EXPIRED,
            message="This exam is no longer available.",
            start_time=exam.start_time,
            end_time=exam.end_time,
        )

    prerequisite_lesson, prerequisite_exam = _prerequisite_exam(exam)
    if prerequisite_exam is not None and not submitted_attempt_count(student, prerequisite_exam):
        return EligibilityVerdict(
            eligible=False,
            reason=EligibilityVerdict.PREREQUISITE,
            message="You must complete the prerequisite assessment to unlock this exam.",
            prerequisite_title=prerequisite_lesson.title,
        )

    if exam.max_attempts is not None:
        used = submitted_attempt_count(student, exam)
        if used >= exam.max_attempts:
            return EligibilityVerdict(
                eligible=False,
                reason=EligibilityVerdict.MAX_ATTEMPTS,
                message=f"You have used all {exam.max_attempts} attempts.",
                remaining_attempts=0,
            )
        return EligibilityVerdict(
            eligible=True,
            remaining_attempts=exam.max_attempts - used,
            start_time=exam.start_time,
            end_time=exam.end_time,
        )

    return EligibilityVerdict(
        eligible=True,
        remaining_attempts=math.inf,
        start_time=exam.start_time,
        end_time=exam.end_time,
    )
