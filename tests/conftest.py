"""
Pytest configuration and shared fixtures for the test suite.
Environment is pinned before edutrack is imported: in-memory SQLite,
no redis, generous rate limits.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "100000")
os.environ.setdefault("RATE_LIMIT_PER_HOUR", "1000000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


# ----- In-memory DB shared by every connection of one test -----
@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite engine with all tables."""
    from edutrack.database import Base
    import edutrack.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(in_memory_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_quiz(db_session):
    """Factory storing a quiz directly, bypassing the authoring service."""
    from edutrack.models import Quiz

    def _make_quiz(
        questions=None,
        passing_score_percent=70,
        max_attempts=3,
        is_active=True,
        time_limit_minutes=None,
        course_id="course-1",
        created_by="instructor-1",
    ):
        if questions is None:
            questions = [
                {
                    "id": f"q{i}",
                    "question": f"Question {i}?",
                    "options": ["A", "B", "C", "D"],
                    "correct_answer_index": i % 4,
                    "points": 10,
                    "difficulty": "medium",
                }
                for i in range(1, 4)
            ]
        quiz = Quiz(
            title="Sample quiz",
            description="A quiz used by the test suite",
            course_id=course_id,
            questions=questions,
            time_limit_minutes=time_limit_minutes,
            passing_score_percent=passing_score_percent,
            max_attempts=max_attempts,
            is_active=is_active,
            created_by=created_by,
        )
        db_session.add(quiz)
        db_session.commit()
        db_session.refresh(quiz)
        return quiz

    return _make_quiz


# ----- API client -----
@pytest.fixture
def override_get_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def api_client(override_get_db):
    """FastAPI TestClient with the in-memory DB override."""
    from fastapi.testclient import TestClient
    from edutrack.main import app
    from edutrack.database import get_db
    from edutrack.utils.rate_limiter import rate_limiter

    rate_limiter.reset()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def identity(user_id: str, role: str) -> dict:
    return {"X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def student_headers():
    return identity("student-1", "student")


@pytest.fixture
def instructor_headers():
    return identity("instructor-1", "instructor")


@pytest.fixture
def admin_headers():
    return identity("admin-1", "admin")
