"""Reply ingestion domain models.

Plain dataclasses and enums shared by the parser, reconciler and
completion state machine. Nothing here touches the database: the catalog
adapter converts ORM rows into the snapshots below.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class QuestionType(str, Enum):
    """Answer shape expected by a survey question."""
    RATING = "RATING"
    YESNO = "YESNO"
    TEXT = "TEXT"
    LONGTEXT = "LONGTEXT"


class SurveyStatus(str, Enum):
    """Survey lifecycle status.

    DRAFT and CLOSED are owned by the survey editor; SENT is set by the send
    step. Reply ingestion only ever moves a survey to PARTIAL or COMPLETED.
    """
    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIAL = "PARTIAL"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class ParsedAnswer:
    """One structured answer recognised in a reply line.

    value is an int for ratings and yes/no (1 = yes, 0 = no), a str for
    comments, and None when the respondent wrote N/A.
    """
    question_code: str
    value: Union[int, str, None]
    is_na: bool = False


@dataclass(frozen=True)
class ParsedReply:
    """Everything recovered from one inbound email."""
    survey_id: Optional[str]
    answers: tuple[ParsedAnswer, ...]
    free_text: str
    raw_content: str


# Persisted value variants. Exactly one is stored per response row.

@dataclass(frozen=True)
class RatingValue:
    value: int


@dataclass(frozen=True)
class TextValue:
    value: str


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class NotApplicable:
    pass


ResponseValue = Union[RatingValue, TextValue, BoolValue, NotApplicable]


@dataclass(frozen=True)
class QuestionSnapshot:
    """Read-only view of a template question."""
    id: str
    code: str
    type: QuestionType
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    sort_order: int = 0

    @property
    def normalized_code(self) -> str:
        return self.code.strip().upper()


@dataclass(frozen=True)
class SurveySnapshot:
    """Survey state loaded from the catalog at the start of an ingestion."""
    id: str
    status: SurveyStatus
    accepts_replies: bool
    questions: tuple[QuestionSnapshot, ...] = field(default_factory=tuple)
    completed_at: Optional[datetime] = None

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class IngestionResult:
    """Outcome reported back to the transport adapter.

    responses_processed counts rows actually written by this call.
    """
    survey_id: str
    responses_processed: int = 0
    free_text_saved: bool = False
    replies_disabled: bool = False
    status: Optional[SurveyStatus] = None
