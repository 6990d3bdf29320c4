"""Builders shared by the assessment tests."""
from decimal import Decimal

from django.contrib.auth import get_user_model

from exams.models import Exam, Option, Question, Section

User = get_user_model()


def make_student(email="student@example.com"):
    return User.objects.create_user(
        username=email, email=email, password="s3cure-pass!", first_name="Test", last_name="Student"
    )


def make_exam(**kwargs):
    defaults = {
        "title": "Physics Mock 1",
        "duration_minutes": 60,
        "total_marks": Decimal("20"),
        "status": Exam.Status.PUBLISHED,
    }
    defaults.update(kwargs)
    return Exam.objects.create(**defaults)


def make_section(exam, title="Section A", order=0):
    return Section.objects.create(exam=exam, title=title, section_order=order)


def make_choice_question(section, question_type=Question.QuestionType.MCQ, marks="5", negative_marks="0",
                         correct=(0,), option_count=4, order=0):
    """Returns (question, options); `correct` holds the indexes of the right options."""
    question = Question.objects.create(
        section=section,
        question_order=order,
        text=f"Question {order + 1}",
        question_type=question_type,
        marks=Decimal(marks),
        negative_marks=Decimal(negative_marks),
    )
    options = [
        Option.objects.create(question=question, text=f"Option {i}", option_order=i, is_correct=i in correct)
        for i in range(option_count)
    ]
    return question, options


def make_nat_question(section, correct_answer="42", marks="10", negative_marks="0", order=0):
    return Question.objects.create(
        section=section,
        question_order=order,
        text="Enter the value",
        question_type=Question.QuestionType.NAT,
        marks=Decimal(marks),
        negative_marks=Decimal(negative_marks),
        correct_answer=correct_answer,
    )
