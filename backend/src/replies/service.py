"""Reply ingestion service.

Sequences one inbound reply through identification, parsing,
reconciliation and completion, inside a single transaction: either every
write of the reply is committed or none is.
"""

import logging
from datetime import datetime, timezone
from email.utils import parseaddr
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from domain.replies.completion import recompute_completion
from domain.replies.errors import (
    IngestionError,
    StoreUnavailableError,
    SurveyNotFoundError,
    SurveyNotIdentifiedError,
)
from domain.replies.models import IngestionResult, SurveySnapshot
from domain.replies.parser import parse_reply
from domain.replies.ports import SurveyCatalogPort
from domain.replies.reconciler import ReconciliationOutcome, ResponseReconciler
from infrastructure.repositories.survey_catalog_repository import SurveyCatalogRepository
from observability.metrics import (
    survey_answers_persisted_total,
    survey_answers_skipped_total,
    survey_replies_total,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sender_address(from_address: Optional[str]) -> Optional[str]:
    """Bare address from a From header ('Anna <anna@x.se>' → 'anna@x.se')."""
    if not from_address:
        return None
    _, address = parseaddr(from_address)
    return (address or from_address).strip()


class ReplyIngestionService:
    """Ingests survey replies received by email.

    Example:
        service = ReplyIngestionService(db)
        result = service.ingest(
            from_address="kontakt@kommun.se",
            to_address="reply+3f2a9c10@healthcare-provider.demo",
            subject="Re: Enkätundersökning",
            body="Q3a: 8\\nQ4a: N/A",
        )
        result.responses_processed  # 2
    """

    def __init__(
        self,
        db: Session,
        catalog: Optional[SurveyCatalogPort] = None,
        completion_threshold: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.catalog = catalog or SurveyCatalogRepository(db)
        self.reconciler = ResponseReconciler(self.catalog)
        self.completion_threshold = (
            completion_threshold
            if completion_threshold is not None
            else settings.COMPLETION_THRESHOLD
        )
        self.clock = clock

    def ingest(
        self,
        from_address: Optional[str],
        to_address: Optional[str],
        subject: Optional[str],
        body: Optional[str],
    ) -> IngestionResult:
        """Ingest one reply and commit its writes.

        Returns:
            IngestionResult with the number of responses written

        Raises:
            SurveyNotIdentifiedError: No survey id in the address or subject
            SurveyNotFoundError: The survey id is unknown
            StoreUnavailableError: The database failed; nothing was committed
        """
        try:
            result = self._ingest(from_address, to_address, subject, body)
            self.db.commit()
        except IngestionError as e:
            self.db.rollback()
            survey_replies_total.labels(outcome=_outcome_for(e)).inc()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            survey_replies_total.labels(outcome="error").inc()
            logger.error(f"Survey store failed during reply ingestion: {e}", exc_info=True)
            raise StoreUnavailableError("Survey store unavailable") from e
        except Exception:
            self.db.rollback()
            survey_replies_total.labels(outcome="error").inc()
            raise

        outcome = "replies_disabled" if result.replies_disabled else "processed"
        survey_replies_total.labels(outcome=outcome).inc()
        return result

    def _ingest(
        self,
        from_address: Optional[str],
        to_address: Optional[str],
        subject: Optional[str],
        body: Optional[str],
    ) -> IngestionResult:
        reply = parse_reply(to_address, subject, body)

        if not reply.survey_id:
            logger.info(f"Could not extract survey id from reply to {to_address!r}")
            raise SurveyNotIdentifiedError("Could not identify survey from email")

        survey = self.catalog.find_survey_with_questions(reply.survey_id)
        if survey is None:
            raise SurveyNotFoundError(
                f"Survey not found: {reply.survey_id}",
                survey_id=reply.survey_id,
            )

        if not survey.accepts_replies:
            logger.info(
                f"Survey {survey.id} does not accept email replies",
                extra={"survey_id": survey.id},
            )
            return IngestionResult(survey_id=survey.id, replies_disabled=True, status=survey.status)

        now = self.clock()
        respondent = sender_address(from_address)

        self.catalog.mark_email_replied(survey.id, respondent, reply.raw_content, now)

        outcome = self.reconciler.apply(survey, reply, respondent, now)
        self._record_metrics(outcome)

        status = survey.status
        if outcome.responses_processed > 0:
            status = self._update_completion(survey, now)

        logger.info(
            f"Ingested reply for survey {survey.id}: "
            f"{outcome.responses_processed} responses, "
            f"{len(outcome.skipped)} skipped, status {status.value}",
            extra={"survey_id": survey.id},
        )

        return IngestionResult(
            survey_id=survey.id,
            responses_processed=outcome.responses_processed,
            free_text_saved=outcome.free_text_saved,
            status=status,
        )

    def _update_completion(self, survey: SurveySnapshot, now: datetime):
        """Recompute status from coverage after this reply's writes."""
        response_count = self.catalog.count_responses(survey.id)
        update = recompute_completion(survey, response_count, now, self.completion_threshold)
        if update is None:
            logger.info(
                f"Leaving status {survey.status.value} of survey {survey.id} unchanged",
                extra={"survey_id": survey.id},
            )
            return survey.status

        applied = self.catalog.update_survey_status(survey.id, update.status, update.completed_at)
        return update.status if applied else survey.status

    def _record_metrics(self, outcome: ReconciliationOutcome) -> None:
        for planned in outcome.written:
            survey_answers_persisted_total.labels(
                question_type=planned.question.type.value
            ).inc()
        for skipped in outcome.skipped:
            survey_answers_skipped_total.labels(reason=skipped.reason).inc()


def _outcome_for(error: IngestionError) -> str:
    if isinstance(error, SurveyNotIdentifiedError):
        return "not_identified"
    if isinstance(error, SurveyNotFoundError):
        return "not_found"
    return "error"
