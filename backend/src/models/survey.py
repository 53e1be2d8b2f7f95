"""Survey and SurveyTemplate models.

A template owns the question set; a survey is one send of a template to an
organization and carries the completion status that reply ingestion
advances.
"""

from datetime import datetime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from domain.replies.models import SurveyStatus
from .base import Base, generate_id


class SurveyTemplate(Base):
    """Reusable question set."""
    __tablename__ = "survey_template"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    questions = relationship(
        "Question",
        back_populates="template",
        order_by="Question.sort_order",
        cascade="all, delete-orphan",
    )
    surveys = relationship("Survey", back_populates="template")

    def __repr__(self):
        return f"<SurveyTemplate(id={self.id}, name={self.name})>"


class Survey(Base):
    """
    Survey model - one quality survey sent to an organization.

    status follows SurveyStatus. accepts_replies gates email reply
    ingestion; completed_at is stamped once, the first time coverage
    crosses the completion threshold, and never moves afterwards.
    """
    __tablename__ = "survey"

    id = Column(String(36), primary_key=True, default=generate_id)
    template_id = Column(
        String(36),
        ForeignKey("survey_template.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    title = Column(Text, nullable=False)
    status = Column(
        Text,
        CheckConstraint(
            "status IN ('DRAFT', 'SENT', 'PARTIAL', 'COMPLETED', 'CLOSED')",
            name="ck_survey_status"
        ),
        nullable=False,
        default=SurveyStatus.DRAFT.value
    )
    accepts_replies = Column(Boolean, nullable=False, default=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_survey_status", "status"),
    )

    template = relationship("SurveyTemplate", back_populates="surveys")
    responses = relationship(
        "SurveyResponse",
        back_populates="survey",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    emails = relationship(
        "SurveyEmail",
        back_populates="survey",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def question_count(self) -> int:
        return len(self.template.questions) if self.template else 0

    def __repr__(self):
        return f"<Survey(id={self.id}, status={self.status})>"
