# exams/models.py
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum


class Exam(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        ARCHIVED = "archived", "Archived"

    class ResultVisibility(models.TextChoices):
        IMMEDIATE = "immediate", "Immediately after submission"
        MANUAL = "manual", "Released manually"
        SCHEDULED = "scheduled", "Released at a scheduled time"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)

    duration_minutes = models.PositiveIntegerField()
    total_marks = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0"))

    # Null means unlimited attempts / unbounded window
    max_attempts = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)

    negative_marking = models.BooleanField(default=True)

    result_visibility = models.CharField(
        max_length=20, choices=ResultVisibility.choices, default=ResultVisibility.IMMEDIATE
    )
    result_release_time = models.DateTimeField(null=True, blank=True)
    show_answers = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    @property
    def duration_seconds(self):
        return self.duration_minutes * 60


class Section(models.Model):
    exam = models.ForeignKey(Exam, related_name='sections', on_delete=models.CASCADE)
    title = models.CharField(max_length=255)
    section_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['section_order', 'id']

    def __str__(self):
        return f"{self.exam.title} / {self.title}"

    @property
    def total_marks(self):
        """Sum of the marks of the questions in this section."""
        cached = getattr(self, '_prefetched_objects_cache', {}).get('questions')
        if cached is not None:
            return sum((q.marks for q in cached), Decimal("0"))
        return self.questions.aggregate(total=Sum('marks'))['total'] or Decimal("0")


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MCQ = "MCQ", "Single Correct Choice"
        MSQ = "MSQ", "Multiple Correct Choices"
        NAT = "NAT", "Numerical Answer"

    section = models.ForeignKey(Section, related_name='questions', on_delete=models.CASCADE)
    question_order = models.PositiveIntegerField(default=0)

    text = models.TextField()
    question_type = models.CharField(max_length=3, choices=QuestionType.choices, default=QuestionType.MCQ)

    marks = models.DecimalField(
        max_digits=6, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))]
    )
    # Deducted only for a wrong (not blank) answer
    negative_marks = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )

    # NAT only, compared after trimming
    correct_answer = models.CharField(max_length=255, blank=True)
    explanation = models.TextField(blank=True)

    class Meta:
        ordering = ['question_order', 'id']

    def __str__(self):
        return f"{self.text[:50]}..."

    @property
    def has_options(self):
        return self.question_type in (self.QuestionType.MCQ, self.QuestionType.MSQ)


class Option(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    text = models.CharField(max_length=255)
    option_order = models.PositiveIntegerField(default=0)
    is_correct = models.BooleanField(default=False)

    class Meta:
        ordering = ['option_order', 'id']

    def __str__(self):
        return self.text


class Lesson(models.Model):
    """
    The slice of a course lesson the exam engine cares about:
    which exam it carries and whether it is locked behind another lesson.
    """
    title = models.CharField(max_length=255)
    exam = models.OneToOneField(Exam, related_name='lesson', on_delete=models.SET_NULL, null=True, blank=True)
    sequential_unlock = models.BooleanField(default=False)
    prerequisite = models.ForeignKey(
        'self', related_name='unlocks', on_delete=models.SET_NULL, null=True, blank=True
    )

    def __str__(self):
        return self.title
