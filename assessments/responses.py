# assessments/responses.py
import logging

from django.db import transaction
from django.db.models import F

from exams.answers import parse_answer

from .exceptions import AttemptClosed, QuestionNotInExam
from .models import ExamAttempt, Response

logger = logging.getLogger(__name__)


def save_response(attempt, question, answer, marked_for_review=None, sequence=None):
    """
    Upsert the student's answer to `question` within `attempt`.

    Repeated calls update the same row. When `sequence` is given, a write
    older than the stored one is ignored, so a late-arriving stale request
    cannot overwrite a newer answer. Returns the stored Response.
    """
    if question.section.exam_id != attempt.exam_id:
        raise QuestionNotInExam()

    # Validated before touching the database; raises exams.answers.InvalidAnswer
    parsed = parse_answer(question, answer)
    stored_answer = parsed.serialize() if parsed is not None else ""

    with transaction.atomic():
        # Lock the attempt so a concurrent submit cannot slip between the check and the write
        locked = ExamAttempt.objects.select_for_update().get(pk=attempt.pk)
        if locked.status != ExamAttempt.Status.IN_PROGRESS:
            raise AttemptClosed()

        response, created = Response.objects.select_for_update().get_or_create(
            attempt=locked,
            question=question,
            defaults={
                'student_answer': stored_answer,
                'is_marked_for_review': bool(marked_for_review),
                'sequence': sequence if sequence is not None else 1,
            },
        )
        if created:
            return response

        if sequence is not None and sequence < response.sequence:
            logger.info(
                "Ignoring stale write for attempt %s question %s (seq %s < %s)",
                attempt.pk, question.pk, sequence, response.sequence,
            )
            return response

        response.student_answer = stored_answer
        if marked_for_review is not None:
            response.is_marked_for_review = marked_for_review
        fields = ['student_answer', 'is_marked_for_review', 'updated_at']
        if sequence is not None:
            response.sequence = sequence
        else:
            response.sequence = F('sequence') + 1
        fields.append('sequence')
        response.save(update_fields=fields)

    response.refresh_from_db(fields=['sequence'])
    return response


def mark_for_review(attempt, question, marked):
    """Flag a question without touching its answer."""
    if question.section.exam_id != attempt.exam_id:
        raise QuestionNotInExam()

    with transaction.atomic():
        locked = ExamAttempt.objects.select_for_update().get(pk=attempt.pk)
        if locked.status != ExamAttempt.Status.IN_PROGRESS:
            raise AttemptClosed()
        response, created = Response.objects.get_or_create(
            attempt=locked, question=question, defaults={'is_marked_for_review': marked}
        )
        if not created and response.is_marked_for_review != marked:
            response.is_marked_for_review = marked
            response.save(update_fields=['is_marked_for_review', 'updated_at'])
    return response


def answers_for(attempt):
    """Map of question id -> stored answer string for every saved response."""
    return dict(
        Response.objects.filter(attempt=attempt).values_list('question_id', 'student_answer')
    )
