"""
QuizAttempt model - one learner's try at a quiz
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, Float, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint
)
from edutrack.database import Base, JSONDocument, utcnow
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - created on start, graded exactly once on submit
    """
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        UniqueConstraint("quiz_id", "user_id", "attempt_number", name="uq_attempt_number"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(
        Uuid(as_uuid=True), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(128), nullable=False, index=True)
    course_id = Column(String(128), nullable=False)
    attempt_number = Column(Integer, nullable=False)
    answers = Column(JSONDocument, nullable=False, default=list)
    score = Column(Integer, nullable=False, default=0)
    max_score = Column(Integer, nullable=False, default=0)
    percentage = Column(Float, nullable=False, default=0.0)
    passed = Column(Boolean, nullable=False, default=False)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    started_at = Column(TIMESTAMP, nullable=False, default=utcnow)
    completed_at = Column(TIMESTAMP)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_submitted(self) -> bool:
        return self.completed_at is not None

    def __repr__(self):
        return (
            f"<QuizAttempt(quiz_id={self.quiz_id}, user_id={self.user_id}, "
            f"attempt={self.attempt_number}, score={self.score})>"
        )
