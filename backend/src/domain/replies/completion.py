"""Survey completion state machine.

Coverage (persisted responses / template questions) is the only
completion signal. Reply ingestion recomputes it after every reply:

    SENT ─┬─> PARTIAL ──> COMPLETED
          └──────────────> COMPLETED

COMPLETED is a one-way gate: later replies never demote it. CLOSED is
terminal: replies are still stored, but status and completed_at are left
alone. DRAFT and CLOSED are otherwise owned by the survey editor.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from .models import SurveySnapshot, SurveyStatus

DEFAULT_COMPLETION_THRESHOLD = 0.5

ALLOWED_TRANSITIONS: Dict[SurveyStatus, List[SurveyStatus]] = {
    SurveyStatus.DRAFT: [
        SurveyStatus.SENT,
        SurveyStatus.PARTIAL,
        SurveyStatus.COMPLETED,
        SurveyStatus.CLOSED,
    ],
    SurveyStatus.SENT: [
        SurveyStatus.PARTIAL,
        SurveyStatus.COMPLETED,
        SurveyStatus.CLOSED,
    ],
    SurveyStatus.PARTIAL: [
        SurveyStatus.PARTIAL,
        SurveyStatus.COMPLETED,
        SurveyStatus.CLOSED,
    ],
    SurveyStatus.COMPLETED: [
        SurveyStatus.COMPLETED,
        SurveyStatus.CLOSED,
    ],
    SurveyStatus.CLOSED: [],  # Terminal state
}


def can_transition(current_status: SurveyStatus, new_status: SurveyStatus) -> bool:
    """Check if a status transition is allowed.

    Re-entering PARTIAL or COMPLETED is allowed so recomputation stays
    idempotent.
    """
    return new_status in ALLOWED_TRANSITIONS.get(current_status, [])


def coverage(response_count: int, question_count: int) -> float:
    """Fraction of the template's questions that have a stored response."""
    if question_count <= 0:
        return 0.0
    return response_count / question_count


@dataclass(frozen=True)
class CompletionUpdate:
    """Status write computed for one survey."""
    status: SurveyStatus
    completed_at: Optional[datetime]


def next_status(
    current_status: SurveyStatus,
    response_count: int,
    question_count: int,
    threshold: float = DEFAULT_COMPLETION_THRESHOLD,
) -> Optional[SurveyStatus]:
    """Status a survey should have after a reply, or None to leave it.

    Args:
        current_status: Status loaded with the survey
        response_count: Persisted responses after this reply's writes
        question_count: Questions on the survey's template
        threshold: Coverage at which the survey counts as COMPLETED

    Returns:
        PARTIAL or COMPLETED, or None for CLOSED surveys and empty templates
    """
    if current_status == SurveyStatus.CLOSED or question_count <= 0:
        return None
    if current_status == SurveyStatus.COMPLETED:
        return SurveyStatus.COMPLETED
    if response_count >= question_count * threshold:
        return SurveyStatus.COMPLETED
    return SurveyStatus.PARTIAL


def recompute_completion(
    survey: SurveySnapshot,
    response_count: int,
    now: datetime,
    threshold: float = DEFAULT_COMPLETION_THRESHOLD,
) -> Optional[CompletionUpdate]:
    """Compute the status write for a survey after a reply.

    completed_at is stamped with now only when the survey has none yet, so
    it never moves once set.
    """
    status = next_status(survey.status, response_count, survey.question_count, threshold)
    if status is None:
        return None

    completed_at = survey.completed_at
    if status == SurveyStatus.COMPLETED and completed_at is None:
        completed_at = now

    return CompletionUpdate(status=status, completed_at=completed_at)
