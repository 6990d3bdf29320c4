import logging

from django.db import DatabaseError
from django.db.models import Prefetch
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from assessments.attempts import start_attempt
from assessments.eligibility import evaluate_eligibility
from assessments.exceptions import NotEligible
from assessments.models import ExamAttempt
from assessments.serializers import ExamAttemptSerializer

from .models import Exam, Lesson, Question, Section
from .serializers import (
    ExamDetailSerializer, ExamListSerializer, ExamSerializer,
    LessonSerializer, QuestionSerializer, SectionSerializer,
)

logger = logging.getLogger(__name__)


class ExamViewSet(viewsets.ModelViewSet):
    queryset = Exam.objects.all().order_by('-created_at')

    # Enable search on title
    filter_backends = [filters.SearchFilter]
    search_fields = ['title']

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_staff:
            # Students only ever see published exams
            queryset = queryset.filter(status=Exam.Status.PUBLISHED)
        if self.action == 'retrieve':
            questions = Question.objects.prefetch_related('options').order_by('question_order', 'id')
            queryset = queryset.prefetch_related(
                Prefetch('sections', queryset=Section.objects.prefetch_related(Prefetch('questions', queryset=questions)))
            )
        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve' and not self.request.user.is_staff:
            return ExamDetailSerializer
        if self.action == 'list':
            # Admin gets full info, students get simple list
            if self.request.user.is_staff:
                return ExamSerializer
            return ExamListSerializer
        return ExamSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'eligibility', 'start', 'attempts']:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    @action(detail=True, methods=['get'], url_path='eligibility')
    def eligibility(self, request, pk=None):
        exam = self.get_object()
        verdict = evaluate_eligibility(request.user, exam)
        return Response(verdict.as_dict())

    @action(detail=True, methods=['post'], url_path='start')
    def start(self, request, pk=None):
        exam = self.get_object()
        try:
            attempt, created = start_attempt(request.user, exam)
        except NotEligible as e:
            return Response(
                {"error": e.message, "eligibility": e.verdict.as_dict()},
                status=status.HTTP_403_FORBIDDEN,
            )
        except DatabaseError:
            logger.exception("Could not start attempt for user %s on exam %s", request.user.pk, exam.pk)
            return Response(
                {"error": "Could not start the exam right now. Please try again."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        serializer = ExamAttemptSerializer(attempt)
        return Response(serializer.data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @action(detail=True, methods=['get'], url_path='attempts')
    def attempts(self, request, pk=None):
        """The current user's attempts at this exam, newest first."""
        exam = self.get_object()
        queryset = ExamAttempt.objects.filter(student=request.user, exam=exam).select_related('exam', 'result')
        serializer = ExamAttemptSerializer(queryset, many=True)
        return Response(serializer.data)


class SectionViewSet(viewsets.ModelViewSet):
    queryset = Section.objects.all().order_by('exam_id', 'section_order', 'id')
    serializer_class = SectionSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        # Filter by Exam if provided ?exam_id=1
        exam_id = self.request.query_params.get('exam_id')
        if exam_id:
            queryset = queryset.filter(exam_id=exam_id)
        return queryset


class QuestionViewSet(viewsets.ModelViewSet):
    queryset = Question.objects.all().prefetch_related('options').order_by('section_id', 'question_order', 'id')
    serializer_class = QuestionSerializer
    permission_classes = [permissions.IsAdminUser]

    filter_backends = [filters.SearchFilter]
    search_fields = ['text']

    def get_queryset(self):
        queryset = super().get_queryset()
        exam_id = self.request.query_params.get('exam_id')
        if exam_id:
            queryset = queryset.filter(section__exam_id=exam_id)
        section_id = self.request.query_params.get('section_id')
        if section_id:
            queryset = queryset.filter(section_id=section_id)
        return queryset


class LessonViewSet(viewsets.ModelViewSet):
    queryset = Lesson.objects.all().order_by('id')
    serializer_class = LessonSerializer
    permission_classes = [permissions.IsAdminUser]
