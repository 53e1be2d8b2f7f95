"""Unit tests for response reconciliation"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from domain.replies.models import (
    BoolValue,
    NotApplicable,
    ParsedAnswer,
    ParsedReply,
    QuestionSnapshot,
    QuestionType,
    RatingValue,
    SurveySnapshot,
    SurveyStatus,
    TextValue,
)
from domain.replies.ports import SurveyCatalogPort
from domain.replies.reconciler import (
    SKIP_OUT_OF_RANGE,
    SKIP_TYPE_MISMATCH,
    SKIP_UNKNOWN_QUESTION,
    ResponseReconciler,
    choose_free_text_question,
    find_question,
    plan_responses,
    to_response_value,
)

NOW = datetime(2026, 3, 3, 10, 0, tzinfo=timezone.utc)

Q1 = QuestionSnapshot(id="q1", code="Q1", type=QuestionType.RATING, min_value=1, max_value=10, sort_order=1)
Q3A = QuestionSnapshot(id="q3a", code="Q3A", type=QuestionType.RATING, min_value=1, max_value=5, sort_order=2)
Q_NOTES = QuestionSnapshot(id="qn", code="Q18_NOTES", type=QuestionType.LONGTEXT, sort_order=3)
Q19 = QuestionSnapshot(id="q19", code="Q19_COMMENT", type=QuestionType.LONGTEXT, sort_order=4)
Q_REC = QuestionSnapshot(id="qrec", code="Q_RECOMMEND", type=QuestionType.YESNO, sort_order=5)
Q_NAME = QuestionSnapshot(id="qname", code="Q_NAME", type=QuestionType.TEXT, sort_order=6)

SURVEY = SurveySnapshot(
    id="s-1",
    status=SurveyStatus.SENT,
    accepts_replies=True,
    questions=(Q1, Q3A, Q_NOTES, Q19, Q_REC, Q_NAME),
)


def make_reply(*answers, free_text=""):
    return ParsedReply(survey_id="s-1", answers=tuple(answers), free_text=free_text, raw_content="raw")


class TestToResponseValue:
    """Test value conversion per question type"""

    def test_rating(self):
        assert to_response_value(ParsedAnswer("Q1", 7), Q1) == RatingValue(7)

    def test_not_applicable_for_any_type(self):
        answer = ParsedAnswer("Q1", None, is_na=True)
        assert to_response_value(answer, Q1) == NotApplicable()
        assert to_response_value(answer, Q_REC) == NotApplicable()

    def test_text_to_rating_is_mismatch(self):
        assert to_response_value(ParsedAnswer("Q1", "bra"), Q1) is None

    def test_text_question_stores_text(self):
        assert to_response_value(ParsedAnswer("Q_NAME", "Anna"), Q_NAME) == TextValue("Anna")
        assert to_response_value(ParsedAnswer("Q19_COMMENT", "Bra"), Q19) == TextValue("Bra")

    def test_yes_no(self):
        assert to_response_value(ParsedAnswer("Q_RECOMMEND", 1), Q_REC) == BoolValue(True)
        assert to_response_value(ParsedAnswer("Q_RECOMMEND", 0), Q_REC) == BoolValue(False)

    def test_bool_is_not_a_rating(self):
        assert to_response_value(ParsedAnswer("Q1", True), Q1) is None


class TestQuestionLookup:
    """Test question lookup helpers"""

    def test_find_question_ignores_case(self):
        assert find_question(SURVEY.questions, "q3a") is Q3A
        assert find_question(SURVEY.questions, " Q_recommend ") is Q_REC

    def test_find_question_unknown(self):
        assert find_question(SURVEY.questions, "Q99") is None

    def test_free_text_prefers_overall_comment(self):
        """Test the '19' question wins over an earlier LONGTEXT question"""
        assert choose_free_text_question(SURVEY.questions) is Q19

    def test_free_text_falls_back_to_first_longtext(self):
        assert choose_free_text_question((Q1, Q_REC, Q_NOTES)) is Q_NOTES

    def test_free_text_no_longtext(self):
        assert choose_free_text_question((Q1, Q_REC)) is None


class TestPlanResponses:
    """Test the write plan for a reply"""

    def test_maps_answers_to_questions(self):
        plan = plan_responses(SURVEY, make_reply(
            ParsedAnswer("Q1", 8),
            ParsedAnswer("Q_RECOMMEND", 1),
        ))

        assert [(p.question.id, p.value) for p in plan.responses] == [
            ("q1", RatingValue(8)),
            ("qrec", BoolValue(True)),
        ]
        assert plan.skipped == ()
        assert plan.free_text_response is None

    def test_unknown_code_skipped(self):
        plan = plan_responses(SURVEY, make_reply(ParsedAnswer("Q42", 8), ParsedAnswer("Q1", 3)))

        assert len(plan.responses) == 1
        assert plan.skipped[0].question_code == "Q42"
        assert plan.skipped[0].reason == SKIP_UNKNOWN_QUESTION

    def test_type_mismatch_skipped(self):
        plan = plan_responses(SURVEY, make_reply(ParsedAnswer("Q_RECOMMEND", "kanske")))
        assert plan.skipped[0].reason == SKIP_TYPE_MISMATCH

    def test_question_bounds_enforced(self):
        """Test a rating valid on 1-10 is skipped on a 1-5 question"""
        plan = plan_responses(SURVEY, make_reply(ParsedAnswer("Q3A", 8)))

        assert plan.responses == ()
        assert plan.skipped[0].reason == SKIP_OUT_OF_RANGE

    def test_repeated_answer_last_wins(self):
        """Test one question answered twice yields one write with the last value"""
        plan = plan_responses(SURVEY, make_reply(ParsedAnswer("Q1", 4), ParsedAnswer("q1", 9)))

        assert len(plan.responses) == 1
        assert plan.responses[0].value == RatingValue(9)

    def test_free_text_fallback_without_answers(self):
        plan = plan_responses(SURVEY, make_reply(free_text="Allt var bra"))

        assert plan.responses == ()
        assert plan.free_text_response.question is Q19
        assert plan.free_text_response.value == TextValue("Allt var bra")

    def test_no_fallback_when_answers_present(self):
        """Test free text is dropped once any structured answer is parsed"""
        plan = plan_responses(SURVEY, make_reply(ParsedAnswer("Q42", 1), free_text="Hej"))
        assert plan.free_text_response is None

    def test_no_fallback_for_empty_reply(self):
        assert plan_responses(SURVEY, make_reply()).free_text_response is None


class TestResponseReconciler:
    """Test writes through the catalog port"""

    @pytest.fixture
    def catalog(self):
        catalog = Mock(spec=SurveyCatalogPort)
        catalog.upsert_response.return_value = "response-id"
        return catalog

    def test_apply_writes_each_response(self, catalog):
        outcome = ResponseReconciler(catalog).apply(
            SURVEY,
            make_reply(ParsedAnswer("Q1", 8), ParsedAnswer("Q42", 1)),
            "anna@kommun.se",
            NOW,
        )

        catalog.upsert_response.assert_called_once_with(
            survey_id="s-1",
            question_id="q1",
            value=RatingValue(8),
            respondent_email="anna@kommun.se",
            raw_email_content="raw",
            responded_at=NOW,
        )
        assert outcome.responses_processed == 1
        assert len(outcome.skipped) == 1
        assert outcome.free_text_saved is False

    def test_apply_free_text_fallback(self, catalog):
        outcome = ResponseReconciler(catalog).apply(SURVEY, make_reply(free_text="Tack"), None, NOW)

        kwargs = catalog.upsert_response.call_args.kwargs
        assert kwargs["question_id"] == "q19"
        assert kwargs["value"] == TextValue("Tack")
        assert outcome.responses_processed == 1
        assert outcome.free_text_saved is True

    def test_apply_nothing_to_write(self, catalog):
        outcome = ResponseReconciler(catalog).apply(SURVEY, make_reply(), None, NOW)

        catalog.upsert_response.assert_not_called()
        assert outcome.responses_processed == 0
