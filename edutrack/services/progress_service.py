"""
Lesson progress tracking service
Completion percentage and one-shot completion timestamp per (user, course)
"""
import logging
import math
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edutrack.database import run_transaction, utcnow
from edutrack.errors import StorageError
from edutrack.models import UserProgress

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Service for recording lesson completions

    Algorithm:
    - percentage = round(100 * completed / total_lessons), half rounds up
    - 0 when the course has no lessons, capped at 100
    - completed once percentage reaches 100; completed_at is set on that
      first transition and never touched again
    """

    def calculate_percentage(self, completed_count: int, total_lessons: int) -> int:
        if total_lessons <= 0:
            return 0
        percentage = math.floor(100 * completed_count / total_lessons + 0.5)
        return min(percentage, 100)

    def mark_lesson_complete(
        self,
        db: Session,
        user_id: str,
        course_id: str,
        lesson_id: str,
        total_lessons: int
    ) -> UserProgress:
        """
        Record that a user finished a lesson

        Args:
            db: Database session
            user_id: Learner identifier
            course_id: Course identifier
            lesson_id: Opaque lesson identifier
            total_lessons: Lesson count of the course (>= 0)

        Returns:
            The progress record, unchanged if the lesson was already recorded
        """
        if total_lessons < 0:
            raise ValueError("total_lessons must be >= 0")

        def work(session: Session) -> UserProgress:
            progress = self._find(session, user_id, course_id)

            if progress is None:
                progress = UserProgress(
                    user_id=user_id,
                    course_id=course_id,
                    completed_lesson_ids=[],
                    percentage=0,
                    completed=False,
                    started_at=utcnow()
                )
                session.add(progress)

            completed_lessons = list(progress.completed_lesson_ids or [])
            if lesson_id in completed_lessons:
                logger.debug(f"Lesson {lesson_id} already completed by {user_id}")
                return progress

            completed_lessons.append(lesson_id)
            progress.completed_lesson_ids = completed_lessons
            progress.percentage = self.calculate_percentage(len(completed_lessons), total_lessons)
            progress.completed = progress.percentage >= 100

            if progress.completed and progress.completed_at is None:
                progress.completed_at = utcnow()

            return progress

        progress = run_transaction(db, work)

        logger.info(
            f"Progress updated: user={user_id}, course={course_id}, lesson={lesson_id}, "
            f"percentage={progress.percentage}, completed={progress.completed}"
        )

        return progress

    def get_progress(self, db: Session, user_id: str, course_id: str) -> Optional[UserProgress]:
        try:
            return self._find(db, user_id, course_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load progress: {str(e)}")
            raise StorageError(f"Failed to load progress: {str(e)}") from e

    def get_progress_for_user(self, db: Session, user_id: str) -> List[UserProgress]:
        """All progress records of a user, most recently started first"""
        try:
            return db.query(UserProgress).filter(
                UserProgress.user_id == user_id
            ).order_by(UserProgress.started_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load progress for user {user_id}: {str(e)}")
            raise StorageError(f"Failed to load progress: {str(e)}") from e

    def _find(self, db: Session, user_id: str, course_id: str) -> Optional[UserProgress]:
        return db.query(UserProgress).filter(
            UserProgress.user_id == user_id,
            UserProgress.course_id == course_id
        ).first()


# Global instance
progress_service = ProgressService()
