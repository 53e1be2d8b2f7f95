"""SurveyEmail model - delivery and reply tracking per recipient."""

from enum import Enum
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import Base, generate_id


class SurveyEmailStatus(str, Enum):
    """Delivery status of one survey email.

    PENDING: Queued for sending
    SENT: Accepted by the mail server
    FAILED: Sending failed
    REPLIED: Recipient replied to the survey
    """
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    REPLIED = "REPLIED"


class SurveyEmail(Base):
    """One outbound survey email and the reply it received, if any."""
    __tablename__ = "survey_email"

    id = Column(String(36), primary_key=True, default=generate_id)
    survey_id = Column(
        String(36),
        ForeignKey("survey.id", ondelete="CASCADE"),
        nullable=False
    )
    recipient_email = Column(Text, nullable=False)
    status = Column(
        Text,
        CheckConstraint(
            "status IN ('PENDING', 'SENT', 'FAILED', 'REPLIED')",
            name="ck_survey_email_status"
        ),
        nullable=False,
        default=SurveyEmailStatus.PENDING.value
    )
    sent_at = Column(DateTime(timezone=True), nullable=True)
    has_reply = Column(Boolean, nullable=False, default=False)
    reply_received_at = Column(DateTime(timezone=True), nullable=True)
    reply_content = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_survey_email_survey_recipient", "survey_id", "recipient_email"),
    )

    survey = relationship("Survey", back_populates="emails")

    def __repr__(self):
        return (
            f"<SurveyEmail(survey_id={self.survey_id}, "
            f"recipient={self.recipient_email}, status={self.status})>"
        )
