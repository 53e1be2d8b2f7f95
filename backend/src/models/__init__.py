"""SQLAlchemy Models for the survey reply ingestion backend"""

from .base import Base
from .survey import Survey, SurveyTemplate
from .question import Question
from .survey_response import SurveyResponse
from .survey_email import SurveyEmail, SurveyEmailStatus

__all__ = [
    "Base",
    "Survey",
    "SurveyTemplate",
    "Question",
    "SurveyResponse",
    "SurveyEmail",
    "SurveyEmailStatus",
]
