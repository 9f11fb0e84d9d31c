"""
Quiz model - instructor-authored quiz definitions
"""
from sqlalchemy import Column, String, Text, Integer, Boolean, TIMESTAMP, Uuid
from edutrack.database import Base, JSONDocument, utcnow
import uuid


class Quiz(Base):
    """
    Quizzes table - question set, passing threshold and attempt policy
    """
    __tablename__ = "quizzes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    course_id = Column(String(128), nullable=False, index=True)
    # [{"id", "question", "options", "correct_answer_index", "points", "difficulty", "explanation"}]
    questions = Column(JSONDocument, nullable=False)
    time_limit_minutes = Column(Integer)
    passing_score_percent = Column(Integer, nullable=False)
    max_attempts = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(128), nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow)

    @property
    def max_score(self) -> int:
        return sum(q.get("points", 0) for q in self.questions or [])

    def __repr__(self):
        return f"<Quiz(id={self.id}, course_id={self.course_id}, title={self.title})>"
