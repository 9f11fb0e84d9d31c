"""
UserProgress model - tracks lesson completion per course
"""
from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, Uuid, UniqueConstraint
from edutrack.database import Base, JSONDocument, utcnow
import uuid


class UserProgress(Base):
    """
    User progress table - one row per (user, course)
    """
    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_progress_user_course"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(128), nullable=False, index=True)
    course_id = Column(String(128), nullable=False, index=True)
    completed_lesson_ids = Column(JSONDocument, nullable=False, default=list)
    percentage = Column(Integer, nullable=False, default=0)  # 0 to 100
    completed = Column(Boolean, nullable=False, default=False)
    started_at = Column(TIMESTAMP, nullable=False, default=utcnow)
    completed_at = Column(TIMESTAMP)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<UserProgress(user_id={self.user_id}, course_id={self.course_id}, completed={self.completed})>"
