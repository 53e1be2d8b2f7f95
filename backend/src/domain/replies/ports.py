"""SurveyCatalogPort interface.

Contract between the ingestion pipeline and whatever stores surveys,
questions and responses. The SQLAlchemy adapter lives in
infrastructure/repositories/survey_catalog_repository.py.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .models import ResponseValue, SurveySnapshot, SurveyStatus


class SurveyCatalogPort(ABC):
    """Port interface for survey catalog access."""

    @abstractmethod
    def find_survey_with_questions(self, survey_id: str) -> Optional[SurveySnapshot]:
        """Load a survey and its template questions.

        Returns:
            SurveySnapshot, or None when no survey has this id
        """
        pass

    @abstractmethod
    def upsert_response(
        self,
        survey_id: str,
        question_id: str,
        value: ResponseValue,
        respondent_email: Optional[str],
        raw_email_content: Optional[str],
        responded_at: datetime,
    ) -> str:
        """Insert or fully replace the response for (survey_id, question_id).

        Must be a single atomic write. Every field, including responded_at,
        is overwritten on conflict.

        Returns:
            str: Id of the stored response row
        """
        pass

    @abstractmethod
    def count_responses(self, survey_id: str) -> int:
        """Count response rows for a survey, including this call's writes."""
        pass

    @abstractmethod
    def update_survey_status(
        self,
        survey_id: str,
        status: SurveyStatus,
        completed_at: Optional[datetime] = None,
    ) -> bool:
        """Atomically apply a status computed from coverage.

        Implementations must never touch a CLOSED survey, never demote
        COMPLETED to PARTIAL, and keep an existing completed_at.

        Returns:
            bool: True if a row was updated
        """
        pass

    @abstractmethod
    def mark_email_replied(
        self,
        survey_id: str,
        recipient_email: Optional[str],
        reply_content: str,
        received_at: datetime,
    ) -> int:
        """Flag the survey emails sent to this recipient as replied.

        Returns:
            int: Number of survey email rows updated (0 is not an error)
        """
        pass
