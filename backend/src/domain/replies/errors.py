"""Reply ingestion failures.

Each error carries the HTTP status the webhook should answer with.
Problems confined to a single answer (unknown question code, rating out of
range) are not errors: they are skipped and logged where they occur.
"""

from typing import Optional


class IngestionError(Exception):
    """Base class for failures that abort the whole ingestion call."""

    http_status = 500

    def __init__(self, message: str, survey_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.survey_id = survey_id


class SurveyNotIdentifiedError(IngestionError):
    """Neither the reply address nor the subject carried a survey id."""

    http_status = 400


class SurveyNotFoundError(IngestionError):
    """The resolved survey id does not exist in the catalog."""

    http_status = 404


class StoreUnavailableError(IngestionError):
    """The catalog store failed or timed out; the call may be retried."""

    http_status = 500
