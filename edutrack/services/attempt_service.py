"""
Quiz attempt lifecycle: start, submit, history
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edutrack.config import settings
from edutrack.database import run_transaction, utcnow
from edutrack.errors import NotFoundError, PreconditionViolation, StorageError
from edutrack.models import Quiz, QuizAttempt
from edutrack.services.grading_service import grading_service

logger = logging.getLogger(__name__)


class AttemptService:
    """
    Service for quiz attempts

    An attempt is created when the learner opens a quiz and graded exactly
    once on submission. Counting prior attempts and inserting the new one
    happen in one transaction; the (quiz, user, attempt_number) unique
    constraint makes a concurrent duplicate fail and retry.
    """

    def start_attempt(
        self,
        db: Session,
        quiz_id: UUID,
        user_id: str,
        course_id: Optional[str] = None
    ) -> QuizAttempt:
        """
        Open a new attempt

        Raises:
            NotFoundError: quiz does not exist
            PreconditionViolation: quiz inactive or attempts exhausted
        """

        def work(session: Session) -> QuizAttempt:
            quiz = session.get(Quiz, quiz_id)
            if quiz is None:
                raise NotFoundError("Quiz not found")
            if not quiz.is_active:
                raise PreconditionViolation("This quiz is not currently available.")

            prior_attempts = session.query(func.count(QuizAttempt.id)).filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.user_id == user_id
            ).scalar()

            if prior_attempts >= quiz.max_attempts:
                raise PreconditionViolation(
                    f"Maximum number of attempts ({quiz.max_attempts}) reached for this quiz."
                )

            attempt = QuizAttempt(
                quiz_id=quiz_id,
                user_id=user_id,
                course_id=course_id or quiz.course_id,
                attempt_number=prior_attempts + 1,
                answers=[],
                score=0,
                max_score=quiz.max_score,
                percentage=0.0,
                passed=False,
                time_spent_seconds=0,
                started_at=utcnow()
            )
            session.add(attempt)
            return attempt

        attempt = run_transaction(db, work)

        logger.info(
            f"Attempt started: {attempt.id} quiz={quiz_id} user={user_id} "
            f"number={attempt.attempt_number}"
        )
        return attempt

    def submit_attempt(
        self,
        db: Session,
        attempt_id: UUID,
        answers: List[Dict[str, Any]],
        total_time_spent_seconds: Optional[int] = None,
        user_id: Optional[str] = None,
        quiz_id: Optional[UUID] = None
    ) -> QuizAttempt:
        """
        Grade and close an attempt

        Args:
            db: Database session
            attempt_id: Attempt created by start_attempt
            answers: [{question_id, selected_answer_index, time_spent_seconds}]
            total_time_spent_seconds: Defaults to the sum of per-answer times
            user_id: When given, the attempt must belong to this user
            quiz_id: When given, the attempt must belong to this quiz

        Returns:
            The graded attempt

        Raises:
            NotFoundError: attempt or quiz missing
            PreconditionViolation: attempt already submitted, or submitted
                past the time limit while enforcement is on
        """

        def work(session: Session) -> QuizAttempt:
            attempt = session.get(QuizAttempt, attempt_id)
            if attempt is None:
                raise NotFoundError("Quiz attempt not found")
            if user_id is not None and attempt.user_id != user_id:
                raise NotFoundError("Quiz attempt not found")
            if quiz_id is not None and attempt.quiz_id != quiz_id:
                raise NotFoundError("Quiz attempt not found")
            if attempt.is_submitted:
                raise PreconditionViolation("This quiz attempt has already been submitted.")

            quiz = session.get(Quiz, attempt.quiz_id)
            if quiz is None:
                raise NotFoundError("Quiz not found")

            now = utcnow()
            time_spent = self._resolve_time_spent(quiz, attempt, answers, total_time_spent_seconds, now)

            result = grading_service.grade_quiz(
                questions=quiz.questions,
                answers=answers,
                passing_score_percent=quiz.passing_score_percent
            )

            attempt.answers = result["answers"]
            attempt.score = result["score"]
            attempt.max_score = result["max_score"]
            attempt.percentage = result["percentage"]
            attempt.passed = result["passed"]
            attempt.time_spent_seconds = time_spent
            attempt.completed_at = now
            return attempt

        attempt = run_transaction(db, work)

        logger.info(
            f"Attempt submitted: {attempt.id} score={attempt.score}/{attempt.max_score} "
            f"percentage={attempt.percentage} passed={attempt.passed}"
        )
        return attempt

    def list_attempts(self, db: Session, quiz_id: UUID, user_id: str) -> List[QuizAttempt]:
        """A user's attempts on a quiz, newest first"""
        try:
            return db.query(QuizAttempt).filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.user_id == user_id
            ).order_by(QuizAttempt.attempt_number.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list attempts: {str(e)}")
            raise StorageError(f"Failed to list attempts: {str(e)}") from e

    def _resolve_time_spent(
        self,
        quiz: Quiz,
        attempt: QuizAttempt,
        answers: List[Dict[str, Any]],
        total_time_spent_seconds: Optional[int],
        now
    ) -> int:
        """
        Time to record for a submission

        Logic:
        - Caller-supplied total, else the sum of per-answer times
        - Past the time limit, wall-clock elapsed since the start replaces it
        - With enforcement on, submissions later than limit + grace are refused
        """
        if total_time_spent_seconds is not None:
            time_spent = total_time_spent_seconds
        else:
            time_spent = sum(a.get("time_spent_seconds", 0) or 0 for a in answers)

        if not quiz.time_limit_minutes:
            return time_spent

        limit_seconds = quiz.time_limit_minutes * 60
        elapsed = (now - attempt.started_at).total_seconds()

        if elapsed <= limit_seconds:
            return time_spent

        if settings.ENFORCE_TIME_LIMIT and elapsed > limit_seconds + settings.TIME_LIMIT_GRACE_SECONDS:
            logger.warning(f"Late submission rejected: attempt={attempt.id} elapsed={elapsed:.0f}s")
            raise PreconditionViolation("The time limit for this quiz has expired.")

        return int(elapsed)


# Global instance
attempt_service = AttemptService()
