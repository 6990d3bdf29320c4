# assessments/visibility.py
from django.utils import timezone

from exams.models import Exam

PROCESSING = "processing"
HIDDEN = "hidden"
VISIBLE = "visible"


def can_view(result, exam, now=None):
    """Whether a student may see `result` right now under the exam's policy."""
    if result is None:
        return False

    policy = exam.result_visibility
    if policy == Exam.ResultVisibility.IMMEDIATE:
        return True
    if policy == Exam.ResultVisibility.SCHEDULED:
        if exam.result_release_time is None:
            return False
        return (now or timezone.now()) >= exam.result_release_time
    # Manual release is flipped by an admin outside this engine
    return False


def result_status(result, exam, now=None):
    """
    "processing" when the submitted attempt has no result yet, otherwise
    "visible" or "hidden" per can_view.
    """
    if result is None:
        return PROCESSING
    return VISIBLE if can_view(result, exam, now=now) else HIDDEN


def can_review_answers(result, exam, now=None):
    return exam.show_answers and can_view(result, exam, now=now)
