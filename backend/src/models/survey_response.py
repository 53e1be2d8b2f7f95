"""SurveyResponse model - one answer to one question of one survey."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .base import Base, generate_id


class SurveyResponse(Base):
    """
    SurveyResponse model.

    At most one row exists per (survey_id, question_id); a later reply
    overwrites it in place. Exactly one of rating_value, text_value and
    bool_value is set, or none of them when na_value is true.
    """
    __tablename__ = "survey_response"

    id = Column(String(36), primary_key=True, default=generate_id)
    survey_id = Column(
        String(36),
        ForeignKey("survey.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    question_id = Column(
        String(36),
        ForeignKey("question.id", ondelete="CASCADE"),
        nullable=False
    )

    rating_value = Column(Integer, nullable=True)
    text_value = Column(Text, nullable=True)
    bool_value = Column(Boolean, nullable=True)
    na_value = Column(Boolean, nullable=False, default=False)

    # Provenance
    respondent_email = Column(Text, nullable=True)
    source = Column(Text, nullable=False, default="EMAIL")
    raw_email_content = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("survey_id", "question_id", name="uq_survey_response_survey_question"),
    )

    survey = relationship("Survey", back_populates="responses")
    question = relationship("Question")

    def __repr__(self):
        return (
            f"<SurveyResponse(survey_id={self.survey_id}, question_id={self.question_id}, "
            f"rating={self.rating_value}, na={self.na_value})>"
        )
