# assessments/scoring.py
"""
The one grading implementation.

`score_attempt` is a pure function: it reads the sections, questions and
options it is given plus a map of stored answers, and returns a ScoreCard.
Persisting the card is the caller's job.
"""
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from exams.answers import MCQAnswer, MSQAnswer, NATAnswer, load_answer
from exams.models import Question

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class QuestionGrade:
    question_id: int
    answered: bool
    is_correct: bool
    marks_awarded: Decimal


@dataclass
class SectionScore:
    section_id: int
    section_order: int
    total_marks: Decimal
    obtained_marks: Decimal = ZERO
    correct_answers: int = 0
    wrong_answers: int = 0
    unanswered: int = 0
    questions: list = field(default_factory=list)


@dataclass
class ScoreCard:
    total_marks: Decimal
    obtained_marks: Decimal
    percentage: Decimal
    sections: list

    def grade_for(self, question_id):
        for section in self.sections:
            for grade in section.questions:
                if grade.question_id == question_id:
                    return grade
        return None


def _as_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _options_of(question):
    options = question.options
    # Django related managers need .all(); plain lists are used as is
    return list(options.all()) if hasattr(options, 'all') else list(options)


def _questions_of(section):
    questions = section.questions
    return list(questions.all()) if hasattr(questions, 'all') else list(questions)


def is_correct(question, answer):
    """Grade one answered question. `answer` is an exams.answers variant."""
    if question.question_type == Question.QuestionType.MCQ:
        if not isinstance(answer, MCQAnswer):
            return False
        correct = next((opt for opt in _options_of(question) if opt.is_correct), None)
        return correct is not None and answer.option_id == str(correct.pk)

    if question.question_type == Question.QuestionType.MSQ:
        if not isinstance(answer, MSQAnswer):
            return False
        expected = {str(opt.pk) for opt in _options_of(question) if opt.is_correct}
        return answer.option_ids == expected

    if question.question_type == Question.QuestionType.NAT:
        if not isinstance(answer, NATAnswer):
            return False
        return answer.value.strip() == (question.correct_answer or "").strip()

    return False


def score_attempt(sections, answers, total_marks, negative_marking=True):
    """
    Grade a full attempt.

    `answers` maps question id to the stored `student_answer` string. Missing
    or blank entries are unanswered: they score nothing and are never
    penalised. Each section is floored at zero on its own, then the total is
    floored again.
    """
    section_scores = []
    overall = ZERO

    for section in sections:
        questions = _questions_of(section)
        score = SectionScore(
            section_id=section.pk,
            section_order=section.section_order,
            total_marks=sum((_as_decimal(q.marks) for q in questions), ZERO),
        )
        raw = ZERO

        for question in questions:
            answer = load_answer(question.question_type, answers.get(question.pk))
            if answer is None:
                score.unanswered += 1
                score.questions.append(QuestionGrade(question.pk, False, False, ZERO))
                continue

            if is_correct(question, answer):
                awarded = _as_decimal(question.marks)
                score.correct_answers += 1
                score.questions.append(QuestionGrade(question.pk, True, True, awarded))
            else:
                awarded = -_as_decimal(question.negative_marks) if negative_marking else ZERO
                score.wrong_answers += 1
                score.questions.append(QuestionGrade(question.pk, True, False, awarded))
            raw += awarded

        score.obtained_marks = max(ZERO, raw)
        overall += score.obtained_marks
        section_scores.append(score)

    obtained = max(ZERO, overall)
    total = _as_decimal(total_marks)
    if total > ZERO:
        percentage = (obtained * HUNDRED / total).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    else:
        percentage = ZERO

    return ScoreCard(
        total_marks=total,
        obtained_marks=obtained,
        percentage=percentage,
        sections=section_scores,
    )
