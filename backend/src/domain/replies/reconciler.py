"""Response reconciliation.

Matches parsed answers to template questions, converts each to the value
variant its question type stores, and writes them through the catalog
port. Answers that cannot be placed are skipped and logged; they never
fail the reply.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .models import (
    BoolValue,
    NotApplicable,
    ParsedAnswer,
    ParsedReply,
    QuestionSnapshot,
    QuestionType,
    RatingValue,
    ResponseValue,
    SurveySnapshot,
    TextValue,
)
from .ports import SurveyCatalogPort

logger = logging.getLogger(__name__)

# Final overall-comment question of the standard template ("Q19_comment")
FREE_TEXT_QUESTION_MARKER = "19"

SKIP_UNKNOWN_QUESTION = "unknown_question"
SKIP_TYPE_MISMATCH = "type_mismatch"
SKIP_OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class PlannedResponse:
    question: QuestionSnapshot
    value: ResponseValue


@dataclass(frozen=True)
class SkippedAnswer:
    question_code: str
    reason: str


@dataclass(frozen=True)
class ReconciliationPlan:
    """Writes to perform for one reply.

    free_text_response is only set when the reply had no structured answers
    and its free text has a question to land on.
    """
    responses: tuple[PlannedResponse, ...] = ()
    skipped: tuple[SkippedAnswer, ...] = ()
    free_text_response: Optional[PlannedResponse] = None


@dataclass(frozen=True)
class ReconciliationOutcome:
    written: tuple[PlannedResponse, ...] = ()
    skipped: tuple[SkippedAnswer, ...] = ()
    free_text_saved: bool = False

    @property
    def responses_processed(self) -> int:
        return len(self.written)


def find_question(
    questions: Iterable[QuestionSnapshot],
    code: str,
) -> Optional[QuestionSnapshot]:
    """Find the question whose code equals code, ignoring case."""
    wanted = code.strip().upper()
    for question in questions:
        if question.normalized_code == wanted:
            return question
    return None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def to_response_value(answer: ParsedAnswer, question: QuestionSnapshot) -> Optional[ResponseValue]:
    """Convert an answer into the value its question stores.

    Returns:
        The value variant, or None when the answer does not fit the
        question (a comment sent to a rating question, for example)
    """
    if answer.is_na:
        return NotApplicable()

    if question.type == QuestionType.RATING:
        if not _is_int(answer.value):
            return None
        return RatingValue(answer.value)

    if question.type in (QuestionType.TEXT, QuestionType.LONGTEXT):
        if answer.value is None:
            return None
        return TextValue(str(answer.value))

    if question.type == QuestionType.YESNO:
        if not _is_int(answer.value):
            return None
        return BoolValue(answer.value == 1)

    return None


def _within_bounds(value: ResponseValue, question: QuestionSnapshot) -> bool:
    if not isinstance(value, RatingValue):
        return True
    if question.min_value is not None and value.value < question.min_value:
        return False
    if question.max_value is not None and value.value > question.max_value:
        return False
    return True


def choose_free_text_question(questions: Iterable[QuestionSnapshot]) -> Optional[QuestionSnapshot]:
    """Pick the LONGTEXT question that receives unattributed reply text.

    Prefers the overall-comment question (code containing "19"), then the
    first LONGTEXT question in template order.
    """
    long_text = sorted(
        (q for q in questions if q.type == QuestionType.LONGTEXT),
        key=lambda q: q.sort_order,
    )
    for question in long_text:
        if FREE_TEXT_QUESTION_MARKER in question.code:
            return question
    return long_text[0] if long_text else None


def plan_responses(survey: SurveySnapshot, reply: ParsedReply) -> ReconciliationPlan:
    """Decide which responses a reply produces, without writing anything.

    An answer repeated within one reply is written once, with the value of
    its last occurrence.
    """
    planned: dict[str, PlannedResponse] = {}
    skipped: list[SkippedAnswer] = []

    for answer in reply.answers:
        question = find_question(survey.questions, answer.question_code)
        if question is None:
            skipped.append(SkippedAnswer(answer.question_code, SKIP_UNKNOWN_QUESTION))
            continue

        value = to_response_value(answer, question)
        if value is None:
            skipped.append(SkippedAnswer(answer.question_code, SKIP_TYPE_MISMATCH))
            continue
        if not _within_bounds(value, question):
            skipped.append(SkippedAnswer(answer.question_code, SKIP_OUT_OF_RANGE))
            continue

        planned[question.id] = PlannedResponse(question=question, value=value)

    free_text_response = None
    if not reply.answers and reply.free_text:
        question = choose_free_text_question(survey.questions)
        if question is not None:
            free_text_response = PlannedResponse(
                question=question,
                value=TextValue(reply.free_text),
            )

    return ReconciliationPlan(
        responses=tuple(planned.values()),
        skipped=tuple(skipped),
        free_text_response=free_text_response,
    )


class ResponseReconciler:
    """Writes a reply's planned responses through the catalog port."""

    def __init__(self, catalog: SurveyCatalogPort):
        self.catalog = catalog

    def apply(
        self,
        survey: SurveySnapshot,
        reply: ParsedReply,
        respondent_email: Optional[str],
        now: datetime,
    ) -> ReconciliationOutcome:
        """Persist every answer of a reply that maps onto a question.

        Args:
            survey: Survey the reply belongs to
            reply: Parsed reply
            respondent_email: Sender address, stored as provenance
            now: Timestamp written to responded_at

        Returns:
            ReconciliationOutcome with the number of rows written
        """
        plan = plan_responses(survey, reply)

        for skipped in plan.skipped:
            logger.warning(
                f"Skipping answer {skipped.question_code} for survey {survey.id}: {skipped.reason}",
                extra={"survey_id": survey.id, "question_code": skipped.question_code},
            )

        writes = list(plan.responses)
        if plan.free_text_response is not None:
            writes.append(plan.free_text_response)

        for planned in writes:
            self.catalog.upsert_response(
                survey_id=survey.id,
                question_id=planned.question.id,
                value=planned.value,
                respondent_email=respondent_email,
                raw_email_content=reply.raw_content,
                responded_at=now,
            )

        return ReconciliationOutcome(
            written=tuple(writes),
            skipped=plan.skipped,
            free_text_saved=plan.free_text_response is not None,
        )
