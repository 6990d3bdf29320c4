import logging

from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status, views
from rest_framework.response import Response

from cores.models import PlatformSetting
from exams.answers import InvalidAnswer
from exams.models import Exam, Question
from exams.serializers import ExamDetailSerializer

from .attempts import (
    fetch_result, flag_for_review, resume_attempt, review_attempt, save_answer, submit_attempt,
)
from .exceptions import AttemptError
from .models import ExamAttempt
from .permissions import IsInstructorOrAdmin
from .serializers import (
    ExamAttemptSerializer, ResponseSerializer, ResultSerializer,
    SaveResponseSerializer, SubmitAttemptSerializer,
)
from .visibility import HIDDEN, PROCESSING, VISIBLE, result_status

logger = logging.getLogger(__name__)


def _own_attempt(request, attempt_id):
    return get_object_or_404(ExamAttempt.objects.select_related('exam'), id=attempt_id, student=request.user)


def _result_payload(attempt, result):
    exam = attempt.exam
    state = result_status(result, exam)
    data = {"status": state}
    if state == VISIBLE:
        data["result"] = ResultSerializer(result).data
        if exam.show_answers:
            data["review"] = review_attempt(attempt)
    elif state == HIDDEN:
        data["result_visibility"] = exam.result_visibility
        data["result_release_time"] = exam.result_release_time
    else:
        data["poll_limit"] = PlatformSetting.load().result_poll_limit
    return data


# --- ADMIN VIEWS ---

class AdminStatsView(views.APIView):
    """
    Returns aggregated statistics for the Admin Dashboard.
    """
    permission_classes = [IsInstructorOrAdmin]

    def get(self, request):
        return Response({
            "total_exams": Exam.objects.count(),
            "published_exams": Exam.objects.filter(status=Exam.Status.PUBLISHED).count(),
            "attempts_in_progress": ExamAttempt.objects.filter(status=ExamAttempt.Status.IN_PROGRESS).count(),
            # Submitted but no result stored yet
            "results_pending": ExamAttempt.objects.filter(
                status=ExamAttempt.Status.SUBMITTED, result__isnull=True
            ).count(),
        })


class PendingResultListView(generics.ListAPIView):
    """Submitted attempts whose result generation has not succeeded yet."""
    permission_classes = [IsInstructorOrAdmin]
    serializer_class = ExamAttemptSerializer

    def get_queryset(self):
        return ExamAttempt.objects.filter(
            status=ExamAttempt.Status.SUBMITTED, result__isnull=True
        ).select_related('exam', 'result').order_by('submitted_at')


# --- STUDENT VIEWS ---

class StudentExamAttemptsView(generics.ListAPIView):
    """List all attempts for the logged-in student."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ExamAttemptSerializer

    def get_queryset(self):
        return ExamAttempt.objects.filter(student=self.request.user).select_related('exam', 'result')


class AttemptDetailView(views.APIView):
    """
    Resume an attempt: remaining time from the wall clock, saved answers,
    and the exam paper. An attempt whose time ran out is submitted here.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, attempt_id):
        attempt = _own_attempt(request, attempt_id)
        state = resume_attempt(attempt)

        data = ExamAttemptSerializer(state.attempt).data
        data['remaining_seconds'] = state.remaining_seconds
        data['expired'] = state.expired
        if state.attempt.is_in_progress:
            data['responses'] = ResponseSerializer(
                state.responses, many=True
            ).data
            data['paper'] = ExamDetailSerializer(attempt.exam).data
        else:
            data['result'] = _result_payload(state.attempt, state.result)
        return Response(data)


class SaveResponseView(views.APIView):
    """Autosave one answer. Safe to repeat; the last write wins."""
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, attempt_id, question_id):
        attempt = _own_attempt(request, attempt_id)
        question = get_object_or_404(Question.objects.select_related('section'), id=question_id)

        serializer = SaveResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data

        try:
            if 'answer' in payload:
                response = save_answer(
                    attempt, question, payload['answer'],
                    marked_for_review=payload.get('marked_for_review'),
                    sequence=payload.get('sequence'),
                )
            else:
                response = flag_for_review(attempt, question, payload['marked_for_review'])
        except InvalidAnswer as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except AttemptError as e:
            return Response({"error": e.message}, status=e.status_code)
        except DatabaseError:
            logger.exception("Failed to save response for attempt %s question %s", attempt.pk, question.pk)
            return Response(
                {"error": "Your answer could not be saved. It will be retried."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response(ResponseSerializer(response).data)

    post = put


class SubmitAttemptView(views.APIView):
    """
    Student submits (or the client timer forces) the attempt.
    A repeat submit returns the same attempt and result.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, attempt_id):
        attempt = _own_attempt(request, attempt_id)
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = submit_attempt(attempt, auto=serializer.validated_data['auto'])

        data = ExamAttemptSerializer(outcome.attempt).data
        data['already_submitted'] = outcome.already_submitted
        data['result'] = _result_payload(outcome.attempt, outcome.result)
        return Response(data)


class AttemptResultView(views.APIView):
    """Result of a submitted attempt, subject to the exam's visibility policy."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, attempt_id):
        attempt = _own_attempt(request, attempt_id)
        if attempt.is_in_progress:
            return Response({"error": "Exam has not been submitted yet"}, status=status.HTTP_400_BAD_REQUEST)

        data = _result_payload(attempt, fetch_result(attempt))
        if data["status"] == PROCESSING:
            return Response(data, status=status.HTTP_202_ACCEPTED)
        return Response(data)
