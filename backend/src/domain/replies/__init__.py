"""Reply ingestion domain - identifying, parsing and reconciling survey replies"""

from .models import (
    QuestionType,
    SurveyStatus,
    ParsedAnswer,
    ParsedReply,
    RatingValue,
    TextValue,
    BoolValue,
    NotApplicable,
    ResponseValue,
    QuestionSnapshot,
    SurveySnapshot,
    IngestionResult,
)
from .identifier import generate_reply_address, resolve_survey_id
from .parser import parse_body, parse_reply
from .reconciler import ResponseReconciler, plan_responses
from .completion import recompute_completion, can_transition, ALLOWED_TRANSITIONS
from .errors import (
    IngestionError,
    SurveyNotIdentifiedError,
    SurveyNotFoundError,
    StoreUnavailableError,
)
from .ports import SurveyCatalogPort

__all__ = [
    "QuestionType",
    "SurveyStatus",
    "ParsedAnswer",
    "ParsedReply",
    "RatingValue",
    "TextValue",
    "BoolValue",
    "NotApplicable",
    "ResponseValue",
    "QuestionSnapshot",
    "SurveySnapshot",
    "IngestionResult",
    "generate_reply_address",
    "resolve_survey_id",
    "parse_body",
    "parse_reply",
    "ResponseReconciler",
    "plan_responses",
    "recompute_completion",
    "can_transition",
    "ALLOWED_TRANSITIONS",
    "IngestionError",
    "SurveyNotIdentifiedError",
    "SurveyNotFoundError",
    "StoreUnavailableError",
    "SurveyCatalogPort",
]
