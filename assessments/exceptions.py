# assessments/exceptions.py
from rest_framework import status


class AttemptError(Exception):
    """Base class for errors raised by the attempt services."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The exam attempt could not be processed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotEligible(AttemptError):
    """Start was refused; carries the structured verdict, not just text."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not eligible to start this exam."

    def __init__(self, verdict):
        self.verdict = verdict
        super().__init__(verdict.message)


class AttemptClosed(AttemptError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This attempt has already been submitted."


class QuestionNotInExam(AttemptError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "This question does not belong to the exam being attempted."
