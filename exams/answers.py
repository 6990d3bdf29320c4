# exams/answers.py
"""
Typed answers for the three question types.

A stored `student_answer` is always a string:
  MCQ -> "<option id>"
  MSQ -> JSON list of option ids, sorted ascending
  NAT -> the raw string typed by the student
An empty string means the question was cleared and counts as unanswered.
"""
import json
from dataclasses import dataclass

from .models import Question


class InvalidAnswer(ValueError):
    """Raised when an answer payload does not fit the question it is given for."""


@dataclass(frozen=True)
class MCQAnswer:
    option_id: str

    def serialize(self):
        return self.option_id


@dataclass(frozen=True)
class MSQAnswer:
    option_ids: frozenset

    def serialize(self):
        return json.dumps(sorted(self.option_ids, key=_option_sort_key))


@dataclass(frozen=True)
class NATAnswer:
    value: str

    def serialize(self):
        return self.value


def _option_sort_key(option_id):
    # Numeric ids sort numerically so "10" lands after "9"
    return (0, int(option_id), "") if option_id.isdigit() else (1, 0, option_id)


def _normalize_option_id(value):
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidAnswer(f"Option id must be an integer or string, got {type(value).__name__}.")
    option_id = str(value).strip()
    if not option_id:
        raise InvalidAnswer("Option id cannot be blank.")
    return option_id


def _is_blank(payload):
    if payload is None:
        return True
    if isinstance(payload, str) and not payload.strip():
        return True
    if isinstance(payload, (list, tuple, set, frozenset)) and not payload:
        return True
    return False


def parse_answer(question, payload, option_ids=None):
    """
    Build the answer variant for `question` from a client payload.

    Returns None when the payload clears the answer. `option_ids` may be passed
    to skip the options query when the caller already has them.
    """
    if _is_blank(payload):
        return None

    if option_ids is None and question.has_options:
        option_ids = {str(pk) for pk in question.options.values_list('id', flat=True)}

    if question.question_type == Question.QuestionType.MCQ:
        if isinstance(payload, (list, tuple, set, frozenset, dict)):
            raise InvalidAnswer("Single choice questions take exactly one option id.")
        option_id = _normalize_option_id(payload)
        if option_id not in option_ids:
            raise InvalidAnswer(f"Option {option_id} does not belong to question {question.pk}.")
        return MCQAnswer(option_id)

    if question.question_type == Question.QuestionType.MSQ:
        if not isinstance(payload, (list, tuple, set, frozenset)):
            raise InvalidAnswer("Multiple choice questions take a list of option ids.")
        selected = frozenset(_normalize_option_id(item) for item in payload)
        unknown = selected - set(option_ids)
        if unknown:
            raise InvalidAnswer(
                f"Options {', '.join(sorted(unknown))} do not belong to question {question.pk}."
            )
        return MSQAnswer(selected)

    if question.question_type == Question.QuestionType.NAT:
        if isinstance(payload, bool) or not isinstance(payload, (str, int, float)):
            raise InvalidAnswer("Numerical answers must be sent as a string.")
        return NATAnswer(str(payload))

    raise InvalidAnswer(f"Unknown question type {question.question_type!r}.")


def load_answer(question_type, stored):
    """Rebuild an answer variant from its stored string. Blank means unanswered."""
    if stored is None or stored == "":
        return None

    if question_type == Question.QuestionType.MCQ:
        return MCQAnswer(stored.strip())

    if question_type == Question.QuestionType.MSQ:
        try:
            decoded = json.loads(stored)
        except ValueError:
            # Legacy rows hold a bare option id
            return MSQAnswer(frozenset([stored.strip()]))
        if not isinstance(decoded, list):
            decoded = [decoded]
        return MSQAnswer(frozenset(str(item).strip() for item in decoded))

    return NATAnswer(stored)


def client_value(answer):
    """Shape an answer for API output: option id, list of ids, or raw string."""
    if answer is None:
        return None
    if isinstance(answer, MSQAnswer):
        return sorted(answer.option_ids, key=_option_sort_key)
    if isinstance(answer, MCQAnswer):
        return answer.option_id
    return answer.value
