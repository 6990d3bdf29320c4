# assessments/models.py
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from exams.models import Exam, Question, Section


class ExamAttempt(models.Model):
    """Tracks one student's attempt at an exam, from start to submission."""

    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In Progress"
        SUBMITTED = "submitted", "Submitted"

    student = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='exam_attempts', on_delete=models.CASCADE)
    exam = models.ForeignKey(Exam, related_name='attempts', on_delete=models.CASCADE)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN_PROGRESS)

    # Authoritative for timer reconstruction
    started_at = models.DateTimeField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    auto_submitted = models.BooleanField(default=False)

    # Result generation bookkeeping
    grading_failures = models.PositiveIntegerField(default=0)
    last_grading_error = models.TextField(blank=True)

    class Meta:
        ordering = ['-started_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'exam'],
                condition=Q(status='in_progress'),
                name='one_in_progress_attempt_per_student_exam',
            ),
        ]

    def __str__(self):
        return f"{self.student} - {self.exam.title} ({self.status})"

    @property
    def is_in_progress(self):
        return self.status == self.Status.IN_PROGRESS

    @property
    def is_submitted(self):
        return self.status == self.Status.SUBMITTED


class Response(models.Model):
    attempt = models.ForeignKey(ExamAttempt, related_name='responses', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='responses', on_delete=models.CASCADE)

    # Serialized answer, see exams.answers
    student_answer = models.TextField(blank=True, default="")
    is_marked_for_review = models.BooleanField(default=False)

    # Last write wins by this counter, not by arrival order
    sequence = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('attempt', 'question')

    def __str__(self):
        return f"Attempt {self.attempt_id} / Q{self.question_id}"

    @property
    def is_answered(self):
        return bool(self.student_answer)


class Result(models.Model):
    attempt = models.OneToOneField(ExamAttempt, related_name='result', on_delete=models.CASCADE)
    total_marks = models.DecimalField(max_digits=8, decimal_places=2)
    obtained_marks = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0"))
    percentage = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0"))
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Result for attempt {self.attempt_id}: {self.obtained_marks}/{self.total_marks}"


class SectionResult(models.Model):
    result = models.ForeignKey(Result, related_name='section_results', on_delete=models.CASCADE)
    section = models.ForeignKey(Section, related_name='results', on_delete=models.CASCADE)
    section_order = models.PositiveIntegerField(default=0)

    total_marks = models.DecimalField(max_digits=8, decimal_places=2)
    obtained_marks = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0"))
    correct_answers = models.PositiveIntegerField(default=0)
    wrong_answers = models.PositiveIntegerField(default=0)
    unanswered = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['section_order', 'id']

    def __str__(self):
        return f"{self.section.title}: {self.obtained_marks}/{self.total_marks}"
