"""Unit tests for the survey completion state machine"""

from datetime import datetime, timezone

import pytest

from domain.replies.completion import (
    ALLOWED_TRANSITIONS,
    CompletionUpdate,
    can_transition,
    coverage,
    next_status,
    recompute_completion,
)
from domain.replies.models import QuestionSnapshot, QuestionType, SurveySnapshot, SurveyStatus

NOW = datetime(2026, 3, 3, 10, 0, tzinfo=timezone.utc)
EARLIER = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)


def make_survey(status, question_count=20, completed_at=None):
    questions = tuple(
        QuestionSnapshot(id=f"q{i}", code=f"Q{i}", type=QuestionType.RATING, sort_order=i)
        for i in range(1, question_count + 1)
    )
    return SurveySnapshot(
        id="s-1",
        status=status,
        accepts_replies=True,
        questions=questions,
        completed_at=completed_at,
    )


class TestSurveyStatusStateMachine:
    """Test SurveyStatus transitions"""

    def test_survey_status_enum_values(self):
        """Test SurveyStatus enum has all required values"""
        assert [s.value for s in SurveyStatus] == ["DRAFT", "SENT", "PARTIAL", "COMPLETED", "CLOSED"]

    def test_sent_transitions(self):
        """Test SENT → PARTIAL / COMPLETED transitions"""
        assert can_transition(SurveyStatus.SENT, SurveyStatus.PARTIAL) is True
        assert can_transition(SurveyStatus.SENT, SurveyStatus.COMPLETED) is True
        assert can_transition(SurveyStatus.SENT, SurveyStatus.DRAFT) is False

    def test_partial_reentry_allowed(self):
        """Test PARTIAL → PARTIAL so recomputation is idempotent"""
        assert can_transition(SurveyStatus.PARTIAL, SurveyStatus.PARTIAL) is True
        assert can_transition(SurveyStatus.PARTIAL, SurveyStatus.COMPLETED) is True

    def test_completed_never_demoted(self):
        """Test COMPLETED cannot fall back to PARTIAL or SENT"""
        assert can_transition(SurveyStatus.COMPLETED, SurveyStatus.PARTIAL) is False
        assert can_transition(SurveyStatus.COMPLETED, SurveyStatus.SENT) is False
        assert can_transition(SurveyStatus.COMPLETED, SurveyStatus.COMPLETED) is True

    def test_closed_is_terminal(self):
        """Test CLOSED is a terminal state (no transitions allowed)"""
        assert ALLOWED_TRANSITIONS[SurveyStatus.CLOSED] == []
        for status in SurveyStatus:
            assert can_transition(SurveyStatus.CLOSED, status) is False


class TestCoverage:
    """Test response coverage ratio"""

    def test_coverage(self):
        assert coverage(12, 20) == 0.6

    def test_zero_questions(self):
        assert coverage(3, 0) == 0.0


class TestNextStatus:
    """Test status derived from coverage"""

    @pytest.mark.parametrize("count,expected", [
        (1, SurveyStatus.PARTIAL),
        (9, SurveyStatus.PARTIAL),
        (10, SurveyStatus.COMPLETED),
        (12, SurveyStatus.COMPLETED),
        (20, SurveyStatus.COMPLETED),
    ])
    def test_threshold_from_sent(self, count, expected):
        """Test 50% of 20 questions is the COMPLETED boundary"""
        assert next_status(SurveyStatus.SENT, count, 20) == expected

    def test_draft_advances_like_sent(self):
        assert next_status(SurveyStatus.DRAFT, 3, 20) == SurveyStatus.PARTIAL

    def test_completed_stays_completed(self):
        """Test coverage dropping below threshold keeps COMPLETED"""
        assert next_status(SurveyStatus.COMPLETED, 2, 20) == SurveyStatus.COMPLETED

    def test_closed_untouched(self):
        assert next_status(SurveyStatus.CLOSED, 20, 20) is None

    def test_empty_template_untouched(self):
        assert next_status(SurveyStatus.SENT, 0, 0) is None

    def test_custom_threshold(self):
        assert next_status(SurveyStatus.SENT, 12, 20, threshold=0.75) == SurveyStatus.PARTIAL
        assert next_status(SurveyStatus.SENT, 15, 20, threshold=0.75) == SurveyStatus.COMPLETED


class TestRecomputeCompletion:
    """Test completed_at stamping"""

    def test_first_completion_stamps_now(self):
        update = recompute_completion(make_survey(SurveyStatus.SENT), 12, NOW)
        assert update == CompletionUpdate(status=SurveyStatus.COMPLETED, completed_at=NOW)

    def test_existing_completed_at_kept(self):
        """Test completed_at never moves once set"""
        survey = make_survey(SurveyStatus.COMPLETED, completed_at=EARLIER)
        update = recompute_completion(survey, 14, NOW)
        assert update.status == SurveyStatus.COMPLETED
        assert update.completed_at == EARLIER

    def test_partial_has_no_completed_at(self):
        update = recompute_completion(make_survey(SurveyStatus.SENT), 8, NOW)
        assert update == CompletionUpdate(status=SurveyStatus.PARTIAL, completed_at=None)

    def test_closed_returns_none(self):
        assert recompute_completion(make_survey(SurveyStatus.CLOSED), 20, NOW) is None

    def test_zero_questions_returns_none(self):
        assert recompute_completion(make_survey(SurveyStatus.SENT, question_count=0), 1, NOW) is None
