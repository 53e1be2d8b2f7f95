"""Pytest fixtures for survey reply ingestion tests.

Provides reusable test fixtures for:
- Database session on an in-memory SQLite database, recreated per test
- A 20-question survey template and a SENT survey using it
- A FastAPI test client whose get_db dependency uses the test session

Usage:
    def test_reply(db_session, survey):
        result = ReplyIngestionService(db_session).ingest(...)
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

from models.base import Base
from models.survey import Survey, SurveyTemplate
from models.question import Question
from models.survey_email import SurveyEmail, SurveyEmailStatus
from database import get_db as database_get_db
from fixtures.surveys import (
    OVERALL_COMMENT_CODE,
    RATING_CODES,
    RECOMMEND_CODE,
    RESPONDENT,
    SURVEY_ID,
)


# One shared connection so the webhook's worker thread sees the same
# in-memory database as the test
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def survey_template(db_session: Session) -> SurveyTemplate:
    """Create the standard 20-question quality survey template."""
    template = SurveyTemplate(name="Kvalitetsuppföljning")
    db_session.add(template)
    db_session.flush()

    order = 0
    for code in RATING_CODES:
        order += 1
        db_session.add(Question(
            template_id=template.id,
            code=code,
            text=f"Question {code}",
            type="RATING",
            min_value=1,
            max_value=10,
            required=True,
            sort_order=order,
        ))
    db_session.add(Question(
        template_id=template.id,
        code=OVERALL_COMMENT_CODE,
        text="Övergripande kommentarer och förbättringsförslag",
        type="LONGTEXT",
        sort_order=order + 1,
    ))
    db_session.add(Question(
        template_id=template.id,
        code=RECOMMEND_CODE,
        text="Skulle du rekommendera denna placering till andra?",
        type="YESNO",
        sort_order=order + 2,
    ))

    db_session.commit()
    db_session.refresh(template)
    return template


@pytest.fixture(scope="function")
def survey(db_session: Session, survey_template: SurveyTemplate) -> Survey:
    """Create a SENT survey that accepts replies, sent to RESPONDENT."""
    survey = Survey(
        id=SURVEY_ID,
        template_id=survey_template.id,
        title="Kvalitetsuppföljning 2026",
        status="SENT",
        accepts_replies=True,
    )
    db_session.add(survey)
    db_session.add(SurveyEmail(
        survey_id=SURVEY_ID,
        recipient_email=RESPONDENT,
        status=SurveyEmailStatus.SENT.value,
    ))
    db_session.commit()
    db_session.refresh(survey)
    return survey


@pytest.fixture(scope="function")
def client(db_session: Session):
    """Create a test client for the webhook.

    Returns a FastAPI TestClient with get_db overridden to the test session.
    """
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()
