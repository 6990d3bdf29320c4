# assessments/attempts.py
"""
Attempt lifecycle: in_progress -> submitted. Nothing leaves `submitted`.

Time remaining on an attempt is always recomputed from `started_at` and the
wall clock, so a client that disappears cannot gain time by coming back.
"""
import logging
from dataclasses import dataclass, field

from django.db import IntegrityError, transaction
from django.db.models import F, Prefetch
from django.utils import timezone

from cores.models import PlatformSetting
from cores.notifications import notify_completion, record_event
from exams.answers import client_value, load_answer
from exams.models import Question, Section

from .eligibility import evaluate_eligibility
from .exceptions import AttemptClosed, NotEligible
from .models import ExamAttempt, Response, Result, SectionResult
from .responses import answers_for, mark_for_review, save_response
from .scoring import score_attempt
from .timer import remaining_seconds

logger = logging.getLogger(__name__)


@dataclass
class ResumeState:
    attempt: ExamAttempt
    remaining_seconds: int
    expired: bool = False
    responses: list = field(default_factory=list)
    result: Result = None


@dataclass
class SubmitOutcome:
    attempt: ExamAttempt
    result: Result = None
    already_submitted: bool = False


def in_progress_attempt(student, exam):
    return ExamAttempt.objects.filter(
        student=student, exam=exam, status=ExamAttempt.Status.IN_PROGRESS
    ).first()


def start_attempt(student, exam, now=None):
    """
    Start (or pick up) the student's attempt at `exam`.

    Returns (attempt, created). An existing in-progress attempt is returned
    as is, without re-checking eligibility. Raises NotEligible otherwise
    when the verdict says no.
    """
    existing = in_progress_attempt(student, exam)
    if existing:
        return existing, False

    verdict = evaluate_eligibility(student, exam, now=now)
    if not verdict.eligible:
        raise NotEligible(verdict)

    try:
        with transaction.atomic():
            attempt = ExamAttempt.objects.create(
                student=student,
                exam=exam,
                status=ExamAttempt.Status.IN_PROGRESS,
                started_at=now or timezone.now(),
            )
    except IntegrityError:
        # Lost a double-tap race; the other request's attempt wins
        attempt = in_progress_attempt(student, exam)
        if attempt is None:
            raise
        logger.info("Concurrent start for student %s exam %s resolved to attempt %s", student.pk, exam.pk, attempt.pk)
        return attempt, False

    record_event(student, 'START', attempt, details=f"Started {exam.title}")
    return attempt, True


def time_left(attempt, now=None):
    if not attempt.is_in_progress:
        return 0
    return remaining_seconds(attempt.started_at, attempt.exam.duration_seconds, now or timezone.now())


def resume_attempt(attempt, now=None):
    """
    Rebuild the state a client needs to continue `attempt`.

    If the wall-clock time has already run out the attempt is submitted
    right here and `expired` is set, rather than handing out a fresh timer.
    """
    now = now or timezone.now()
    if attempt.is_submitted:
        return ResumeState(attempt=attempt, remaining_seconds=0, result=fetch_result(attempt))

    remaining = time_left(attempt, now)
    if remaining <= 0:
        logger.info("Attempt %s expired while the client was away, auto-submitting", attempt.pk)
        outcome = submit_attempt(attempt, auto=True, now=now)
        return ResumeState(attempt=outcome.attempt, remaining_seconds=0, expired=True, result=outcome.result)

    responses = list(Response.objects.filter(attempt=attempt).select_related('question').order_by('question_id'))
    return ResumeState(attempt=attempt, remaining_seconds=remaining, responses=responses)


def _close_if_expired(attempt, now=None):
    if attempt.is_in_progress and time_left(attempt, now) <= 0:
        submit_attempt(attempt, auto=True, now=now)
        raise AttemptClosed("Time is up. Your exam has been submitted.")


def save_answer(attempt, question, answer, marked_for_review=None, sequence=None, now=None):
    """
    Autosave path used by the API. A write that arrives after the clock has
    run out closes the attempt instead of being stored.
    """
    _close_if_expired(attempt, now)
    return save_response(attempt, question, answer, marked_for_review=marked_for_review, sequence=sequence)


def flag_for_review(attempt, question, marked, now=None):
    _close_if_expired(attempt, now)
    return mark_for_review(attempt, question, marked)


def submit_attempt(attempt, auto=False, now=None):
    """
    Close `attempt` and grade it.

    The status flip is a conditional UPDATE, so only one caller ever wins it.
    Losers (and repeat calls) get the existing result back. A grading failure
    is recorded on the attempt and never undoes the submission.
    """
    now = now or timezone.now()
    closed = ExamAttempt.objects.filter(
        pk=attempt.pk, status=ExamAttempt.Status.IN_PROGRESS
    ).update(status=ExamAttempt.Status.SUBMITTED, submitted_at=now, auto_submitted=auto)
    attempt.refresh_from_db()

    if not closed:
        return SubmitOutcome(attempt=attempt, result=fetch_result(attempt), already_submitted=True)

    result = generate_result(attempt)
    try:
        notify_completion(attempt, result)
    except Exception:
        # The attempt is already submitted, a sink failure must not surface
        logger.exception("Completion notification failed for attempt %s", attempt.pk)
    return SubmitOutcome(attempt=attempt, result=result)


def _load_sections(exam):
    questions = Question.objects.prefetch_related('options').order_by('question_order', 'id')
    return list(
        Section.objects.filter(exam=exam)
        .order_by('section_order', 'id')
        .prefetch_related(Prefetch('questions', queryset=questions))
    )


def _persist_result(attempt, card):
    with transaction.atomic():
        result = Result.objects.create(
            attempt=attempt,
            total_marks=card.total_marks,
            obtained_marks=card.obtained_marks,
            percentage=card.percentage,
        )
        SectionResult.objects.bulk_create([
            SectionResult(
                result=result,
                section_id=section.section_id,
                section_order=section.section_order,
                total_marks=section.total_marks,
                obtained_marks=section.obtained_marks,
                correct_answers=section.correct_answers,
                wrong_answers=section.wrong_answers,
                unanswered=section.unanswered,
            )
            for section in card.sections
        ])
    return result


def generate_result(attempt):
    """
    Score a submitted attempt and store its Result. Safe to call again:
    an existing Result is returned untouched. Returns None on failure.
    """
    existing = Result.objects.filter(attempt=attempt).first()
    if existing:
        return existing

    try:
        exam = attempt.exam
        card = score_attempt(
            _load_sections(exam),
            answers_for(attempt),
            exam.total_marks,
            negative_marking=exam.negative_marking,
        )
        result = _persist_result(attempt, card)
    except IntegrityError:
        # Another worker stored it first
        result = Result.objects.filter(attempt=attempt).first()
        if result is not None:
            return result
        _record_grading_failure(attempt, "Result could not be stored")
        return None
    except Exception as e:
        logger.exception("Error generating result for attempt %s", attempt.pk)
        _record_grading_failure(attempt, str(e) or type(e).__name__)
        return None

    record_event(attempt.student, 'RESULT', result, details=f"{result.obtained_marks}/{result.total_marks}")
    return result


def _record_grading_failure(attempt, message):
    ExamAttempt.objects.filter(pk=attempt.pk).update(
        grading_failures=F('grading_failures') + 1,
        last_grading_error=message[:2000],
    )
    attempt.refresh_from_db(fields=['grading_failures', 'last_grading_error'])
    record_event(attempt.student, 'RESULT_FAILED', attempt, details=message)


def fetch_result(attempt):
    """
    The attempt's Result, or None while it is still being processed.

    A submitted attempt with no Result gets another grading try as long as
    the retry budget in PlatformSetting allows.
    """
    result = Result.objects.filter(attempt=attempt).prefetch_related('section_results').first()
    if result or not attempt.is_submitted:
        return result

    if attempt.grading_failures >= PlatformSetting.load().max_grading_retries:
        return None
    return generate_result(attempt)


def review_attempt(attempt):
    """Per-question breakdown with the answer key, for exams that show answers."""
    sections = _load_sections(attempt.exam)
    answers = answers_for(attempt)
    card = score_attempt(sections, answers, attempt.exam.total_marks, negative_marking=attempt.exam.negative_marking)

    review = []
    for section in sections:
        for question in section.questions.all():
            grade = card.grade_for(question.pk)
            if question.has_options:
                correct = [opt.pk for opt in question.options.all() if opt.is_correct]
            else:
                correct = question.correct_answer
            review.append({
                "question": question.pk,
                "section": section.pk,
                "question_type": question.question_type,
                "answer": client_value(load_answer(question.question_type, answers.get(question.pk))),
                "correct_answer": correct,
                "answered": grade.answered,
                "is_correct": grade.is_correct,
                "marks_awarded": grade.marks_awarded,
                "explanation": question.explanation,
            })
    return review


def expire_overdue_attempts(now=None):
    """Submit every in-progress attempt whose time has run out. Returns them."""
    now = now or timezone.now()
    expired = []
    for attempt in ExamAttempt.objects.filter(status=ExamAttempt.Status.IN_PROGRESS).select_related('exam'):
        if time_left(attempt, now) > 0:
            continue
        outcome = submit_attempt(attempt, auto=True, now=now)
        if not outcome.already_submitted:
            expired.append(outcome.attempt)
    return expired


def retry_missing_results(limit=None):
    """Regenerate results for submitted attempts that have none."""
    pending = ExamAttempt.objects.filter(
        status=ExamAttempt.Status.SUBMITTED, result__isnull=True
    ).select_related('exam', 'student').order_by('submitted_at')
    if limit:
        pending = pending[:limit]

    generated = []
    for attempt in pending:
        result = generate_result(attempt)
        if result is not None:
            generated.append(result)
    return generated
