"""Question model - one entry of a survey template."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates

from domain.replies.models import QuestionType
from .base import Base, generate_id


class Question(Base):
    """
    Question model.

    code is the human-entered label respondents type in their replies
    ("Q3a", "Q19_comment"). It is unique per template regardless of case,
    so it is stored uppercased.
    """
    __tablename__ = "question"

    id = Column(String(36), primary_key=True, default=generate_id)
    template_id = Column(
        String(36),
        ForeignKey("survey_template.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    code = Column(Text, nullable=False)
    text = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=True)
    type = Column(
        Text,
        CheckConstraint(
            "type IN ('RATING', 'YESNO', 'TEXT', 'LONGTEXT')",
            name="ck_question_type"
        ),
        nullable=False,
        default=QuestionType.RATING.value
    )
    min_value = Column(Integer, nullable=True)
    max_value = Column(Integer, nullable=True)
    required = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("template_id", "code", name="uq_question_template_code"),
    )

    template = relationship("SurveyTemplate", back_populates="questions")

    @validates("code")
    def normalize_code(self, key, value):
        """Store codes uppercased so lookups are case-insensitive."""
        if value is None or not value.strip():
            raise ValueError("Question code must not be empty")
        return value.strip().upper()

    @validates("type")
    def validate_type(self, key, value):
        """Ensure type is a valid QuestionType."""
        try:
            return QuestionType(value).value
        except ValueError:
            raise ValueError(
                f"Invalid question type: {value}. "
                f"Must be one of {[t.value for t in QuestionType]}"
            )

    def __repr__(self):
        return f"<Question(id={self.id}, code={self.code}, type={self.type})>"
