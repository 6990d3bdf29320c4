import json

from django.test import TestCase

from assessments.tests.helpers import make_choice_question, make_exam, make_nat_question, make_section
from exams.answers import (
    InvalidAnswer, MCQAnswer, MSQAnswer, NATAnswer, client_value, load_answer, parse_answer,
)
from exams.models import Question


class ParseAnswerTestCase(TestCase):

    def setUp(self):
        section = make_section(make_exam())
        self.mcq, self.mcq_options = make_choice_question(section)
        self.msq, self.msq_options = make_choice_question(
            section, question_type=Question.QuestionType.MSQ, correct=(1, 2), order=1
        )
        self.nat = make_nat_question(section, order=2)

    def test_mcq_accepts_int_or_string_id(self):
        pk = self.mcq_options[1].pk
        self.assertEqual(parse_answer(self.mcq, pk), MCQAnswer(str(pk)))
        self.assertEqual(parse_answer(self.mcq, str(pk)), MCQAnswer(str(pk)))

    def test_msq_ignores_order_and_duplicates(self):
        a, b = self.msq_options[0].pk, self.msq_options[3].pk
        self.assertEqual(parse_answer(self.msq, [b, a, b]), parse_answer(self.msq, [a, b]))

    def test_blank_payloads_clear_the_answer(self):
        self.assertIsNone(parse_answer(self.mcq, None))
        self.assertIsNone(parse_answer(self.msq, []))
        self.assertIsNone(parse_answer(self.nat, "   "))

    def test_booleans_are_not_option_ids(self):
        with self.assertRaises(InvalidAnswer):
            parse_answer(self.mcq, True)

    def test_unknown_option(self):
        with self.assertRaises(InvalidAnswer):
            parse_answer(self.msq, [self.msq_options[0].pk, self.mcq_options[0].pk])

    def test_nat_takes_numbers_as_strings(self):
        self.assertEqual(parse_answer(self.nat, 42), NATAnswer("42"))
        with self.assertRaises(InvalidAnswer):
            parse_answer(self.nat, ["42"])

    def test_option_ids_can_be_supplied(self):
        with self.assertNumQueries(0):
            answer = parse_answer(self.mcq, "7", option_ids={"7", "8"})
        self.assertEqual(answer, MCQAnswer("7"))


class StoredAnswerTestCase(TestCase):

    def test_msq_sorts_numerically(self):
        stored = MSQAnswer(frozenset({"10", "9", "2"})).serialize()
        self.assertEqual(json.loads(stored), ["2", "9", "10"])

    def test_empty_string_is_unanswered(self):
        for question_type in Question.QuestionType.values:
            self.assertIsNone(load_answer(question_type, ""))

    def test_legacy_msq_with_a_bare_id(self):
        self.assertEqual(load_answer(Question.QuestionType.MSQ, "12"), MSQAnswer(frozenset({"12"})))

    def test_nat_keeps_whitespace(self):
        self.assertEqual(load_answer(Question.QuestionType.NAT, " 3.5 "), NATAnswer(" 3.5 "))

    def test_client_value(self):
        self.assertEqual(client_value(MSQAnswer(frozenset({"3", "1"}))), ["1", "3"])
        self.assertEqual(client_value(MCQAnswer("4")), "4")
        self.assertIsNone(client_value(None))
