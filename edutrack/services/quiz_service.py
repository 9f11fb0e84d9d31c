"""
Quiz authoring service
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edutrack.errors import NotFoundError, PermissionDenied, PreconditionViolation, StorageError
from edutrack.models import Quiz, QuizAttempt
from edutrack.permissions import Capability, can_modify_owned, has_capability, max_attempts_cap
from edutrack.schemas.quiz import QuizCreate, QuizUpdate
from edutrack.schemas.user import CurrentUser

logger = logging.getLogger(__name__)


class QuizService:
    """Create, read, update and delete quiz definitions"""

    def create_quiz(self, db: Session, payload: QuizCreate, creator: CurrentUser) -> Quiz:
        """
        Store a new quiz

        Raises:
            PermissionDenied: role cannot author quizzes
            PreconditionViolation: max_attempts above the role's cap
        """
        if not has_capability(creator.role, Capability.CREATE_QUIZ):
            raise PermissionDenied("You are not allowed to create quizzes.")

        self._check_attempts_cap(payload.max_attempts, creator)

        quiz = Quiz(
            title=payload.title,
            description=payload.description,
            course_id=payload.course_id,
            questions=[q.model_dump() for q in payload.questions],
            time_limit_minutes=payload.time_limit_minutes,
            passing_score_percent=payload.passing_score_percent,
            max_attempts=payload.max_attempts,
            is_active=payload.is_active,
            created_by=creator.user_id
        )

        try:
            db.add(quiz)
            db.commit()
            db.refresh(quiz)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create quiz: {str(e)}")
            raise StorageError(f"Failed to create quiz: {str(e)}") from e

        logger.info(f"Quiz created: {quiz.id} by {creator.user_id} ({len(quiz.questions)} questions)")
        return quiz

    def get_quiz(self, db: Session, quiz_id: UUID) -> Quiz:
        try:
            quiz = db.get(Quiz, quiz_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load quiz {quiz_id}: {str(e)}")
            raise StorageError(f"Failed to load quiz: {str(e)}") from e

        if quiz is None:
            raise NotFoundError("Quiz not found")
        return quiz

    def list_quizzes(
        self,
        db: Session,
        course_id: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[Quiz]:
        """Quizzes newest first, optionally limited to one course"""
        try:
            query = db.query(Quiz)
            if course_id is not None:
                query = query.filter(Quiz.course_id == course_id)
            if not include_inactive:
                query = query.filter(Quiz.is_active.is_(True))
            return query.order_by(Quiz.created_at.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list quizzes: {str(e)}")
            raise StorageError(f"Failed to list quizzes: {str(e)}") from e

    def update_quiz(self, db: Session, quiz_id: UUID, changes: QuizUpdate, editor: CurrentUser) -> Quiz:
        quiz = self.get_quiz(db, quiz_id)

        if not can_modify_owned(editor.role, Capability.UPDATE_QUIZ, editor.user_id, quiz.created_by):
            raise PermissionDenied("You are not allowed to modify this quiz.")

        # Only the time limit may be cleared with an explicit null
        updates = {
            field: value
            for field, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or field == "time_limit_minutes"
        }
        if "max_attempts" in updates:
            self._check_attempts_cap(updates["max_attempts"], editor)

        for field, value in updates.items():
            setattr(quiz, field, value)

        try:
            db.commit()
            db.refresh(quiz)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update quiz {quiz_id}: {str(e)}")
            raise StorageError(f"Failed to update quiz: {str(e)}") from e

        logger.info(f"Quiz updated: {quiz_id} fields={sorted(updates)}")
        return quiz

    def delete_quiz(self, db: Session, quiz_id: UUID, editor: CurrentUser) -> None:
        """Delete a quiz together with its attempts"""
        quiz = self.get_quiz(db, quiz_id)

        if not can_modify_owned(editor.role, Capability.DELETE_QUIZ, editor.user_id, quiz.created_by):
            raise PermissionDenied("You are not allowed to delete this quiz.")

        try:
            db.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz_id).delete(synchronize_session=False)
            db.delete(quiz)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete quiz {quiz_id}: {str(e)}")
            raise StorageError(f"Failed to delete quiz: {str(e)}") from e

        logger.info(f"Quiz deleted: {quiz_id}")

    def _check_attempts_cap(self, max_attempts: int, user: CurrentUser):
        cap = max_attempts_cap(user.role)
        if max_attempts > cap:
            raise PreconditionViolation(
                f"Maximum attempts cannot exceed {cap} for {user.role.value} role."
            )


# Global instance
quiz_service = QuizService()
