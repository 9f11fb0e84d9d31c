"""
Analytics service for quiz statistics and learner achievements
"""
import logging
from typing import Dict, List, Any
from uuid import UUID
from collections import defaultdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edutrack.errors import NotFoundError, StorageError
from edutrack.models import Quiz, QuizAttempt, UserProgress

logger = logging.getLogger(__name__)


ACHIEVEMENTS = {
    "first-course-completed": {
        "name": "First Course Completed",
        "description": "Finished every lesson of a course for the first time."
    },
    "top-performer": {
        "name": "Top Performer",
        "description": "Completed more than one course."
    },
}


class AnalyticsService:
    """Service for generating instructor and learner analytics"""

    def get_quiz_stats(self, db: Session, quiz_id: UUID) -> Dict[str, Any]:
        """
        Statistics for a quiz over submitted attempts

        Args:
            db: Database session
            quiz_id: Quiz UUID

        Returns:
            Dictionary with totals, averages and per-question stats
        """
        try:
            quiz = db.get(Quiz, quiz_id)
            if quiz is None:
                raise NotFoundError("Quiz not found")

            attempts = db.query(QuizAttempt).filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.completed_at.isnot(None)
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load quiz stats: {str(e)}")
            raise StorageError(f"Failed to load quiz statistics: {str(e)}") from e

        if not attempts:
            return {
                "total_attempts": 0,
                "average_score": 0.0,
                "pass_rate": 0.0,
                "average_time_spent": 0.0,
                "question_stats": []
            }

        total_attempts = len(attempts)
        passed_attempts = sum(1 for a in attempts if a.passed)
        average_score = sum(a.percentage for a in attempts) / total_attempts
        average_time = sum(a.time_spent_seconds for a in attempts) / total_attempts

        return {
            "total_attempts": total_attempts,
            "average_score": round(average_score, 2),
            "pass_rate": round(passed_attempts / total_attempts * 100, 2),
            "average_time_spent": round(average_time, 2),
            "question_stats": self._calculate_question_stats(quiz, attempts)
        }

    def _calculate_question_stats(
        self,
        quiz: Quiz,
        attempts: List[QuizAttempt]
    ) -> List[Dict[str, Any]]:
        """Correct/total answers and mean time per question"""

        answers_by_question = defaultdict(list)
        for attempt in attempts:
            for answer in attempt.answers or []:
                answers_by_question[answer.get("question_id")].append(answer)

        stats = []
        for question in quiz.questions or []:
            answers = answers_by_question.get(question["id"], [])
            correct = sum(1 for a in answers if a.get("is_correct"))
            avg_time = (
                sum(a.get("time_spent_seconds", 0) for a in answers) / len(answers)
                if answers else 0.0
            )

            stats.append({
                "question_id": question["id"],
                "correct_answers": correct,
                "total_answers": len(answers),
                "average_time_spent": round(avg_time, 2),
                "difficulty": question.get("difficulty", "medium")
            })

        return stats

    def get_achievements(self, progress_records: List[UserProgress]) -> List[Dict[str, str]]:
        """Achievements earned from a learner's progress records"""

        earned = []
        completed = [p for p in progress_records if p.completed]

        if any(p.completed_at is not None for p in completed):
            earned.append({"id": "first-course-completed", **ACHIEVEMENTS["first-course-completed"]})

        if len(completed) > 1:
            earned.append({"id": "top-performer", **ACHIEVEMENTS["top-performer"]})

        return earned


# Global instance
analytics_service = AnalyticsService()
