"""Survey catalog repository for database operations"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import and_, func, literal, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, selectinload

from domain.replies.models import (
    BoolValue,
    NotApplicable,
    QuestionSnapshot,
    QuestionType,
    RatingValue,
    ResponseValue,
    SurveySnapshot,
    SurveyStatus,
    TextValue,
)
from domain.replies.ports import SurveyCatalogPort
from models.base import generate_id
from models.survey import Survey, SurveyTemplate
from models.survey_email import SurveyEmail, SurveyEmailStatus
from models.survey_response import SurveyResponse

RESPONSE_SOURCE_EMAIL = "EMAIL"

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def response_columns(value: ResponseValue) -> Dict[str, Any]:
    """Map a response value variant onto the four nullable value columns."""
    columns: Dict[str, Any] = {
        "rating_value": None,
        "text_value": None,
        "bool_value": None,
        "na_value": False,
    }
    if isinstance(value, RatingValue):
        columns["rating_value"] = value.value
    elif isinstance(value, TextValue):
        columns["text_value"] = value.value
    elif isinstance(value, BoolValue):
        columns["bool_value"] = value.value
    elif isinstance(value, NotApplicable):
        columns["na_value"] = True
    else:
        raise TypeError(f"Unsupported response value: {value!r}")
    return columns


class SurveyCatalogRepository(SurveyCatalogPort):
    """SQLAlchemy implementation of SurveyCatalogPort.

    All writes go through single statements so concurrent replies to the
    same survey cannot lose updates. Transaction boundaries belong to the
    caller.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def find_survey_with_questions(self, survey_id: str) -> Optional[SurveySnapshot]:
        stmt = (
            select(Survey)
            .options(selectinload(Survey.template).selectinload(SurveyTemplate.questions))
            .where(Survey.id == survey_id)
        )
        survey = self.db.execute(stmt).scalar_one_or_none()
        if survey is None:
            return None

        questions = tuple(
            QuestionSnapshot(
                id=question.id,
                code=question.code,
                type=QuestionType(question.type),
                min_value=question.min_value,
                max_value=question.max_value,
                sort_order=question.sort_order,
            )
            for question in survey.template.questions
        )

        return SurveySnapshot(
            id=survey.id,
            status=SurveyStatus(survey.status),
            accepts_replies=bool(survey.accepts_replies),
            questions=questions,
            completed_at=survey.completed_at,
        )

    def _insert_for_dialect(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Upsert not supported for dialect '{dialect}'")

    def upsert_response(
        self,
        survey_id: str,
        question_id: str,
        value: ResponseValue,
        respondent_email: Optional[str],
        raw_email_content: Optional[str],
        responded_at: datetime,
    ) -> str:
        """Insert or overwrite the response row for (survey_id, question_id).

        A single INSERT ... ON CONFLICT DO UPDATE; on conflict every field
        except the row identity is replaced.
        """
        values = {
            "id": generate_id(),
            "survey_id": survey_id,
            "question_id": question_id,
            **response_columns(value),
            "respondent_email": respondent_email,
            "source": RESPONSE_SOURCE_EMAIL,
            "raw_email_content": raw_email_content,
            "responded_at": responded_at,
        }

        insert = self._insert_for_dialect()
        stmt = insert(SurveyResponse).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["survey_id", "question_id"],
            set_={
                key: stmt.excluded[key]
                for key in values
                if key not in ("id", "survey_id", "question_id")
            },
        )
        self.db.execute(stmt)

        return self.db.execute(
            select(SurveyResponse.id).where(
                and_(
                    SurveyResponse.survey_id == survey_id,
                    SurveyResponse.question_id == question_id,
                )
            )
        ).scalar_one()

    def count_responses(self, survey_id: str) -> int:
        stmt = select(func.count()).select_from(SurveyResponse).where(
            SurveyResponse.survey_id == survey_id
        )
        return self.db.execute(stmt).scalar_one()

    def update_survey_status(
        self,
        survey_id: str,
        status: SurveyStatus,
        completed_at: Optional[datetime] = None,
    ) -> bool:
        """Apply a coverage-derived status in one conditional UPDATE.

        The WHERE clause skips CLOSED surveys and, for PARTIAL, surveys
        already COMPLETED. completed_at is only filled when still NULL.
        """
        conditions = [
            Survey.id == survey_id,
            Survey.status != SurveyStatus.CLOSED.value,
        ]
        if status == SurveyStatus.PARTIAL:
            conditions.append(Survey.status != SurveyStatus.COMPLETED.value)

        values: Dict[str, Any] = {"status": status.value}
        if completed_at is not None:
            values["completed_at"] = func.coalesce(
                Survey.completed_at,
                literal(completed_at, type_=Survey.completed_at.type),
            )

        stmt = (
            update(Survey)
            .where(and_(*conditions))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount > 0

    def mark_email_replied(
        self,
        survey_id: str,
        recipient_email: Optional[str],
        reply_content: str,
        received_at: datetime,
    ) -> int:
        if not recipient_email:
            return 0

        stmt = (
            update(SurveyEmail)
            .where(
                and_(
                    SurveyEmail.survey_id == survey_id,
                    func.lower(SurveyEmail.recipient_email) == recipient_email.lower(),
                )
            )
            .values(
                has_reply=True,
                reply_received_at=received_at,
                reply_content=reply_content,
                status=SurveyEmailStatus.REPLIED.value,
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount
