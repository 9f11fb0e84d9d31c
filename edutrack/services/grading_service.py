"""
Quiz grading service
Single-choice questions graded by exact index match
"""
import logging
from typing import Dict, Any, List, Optional, Tuple

from edutrack.config import settings

logger = logging.getLogger(__name__)


class GradingService:
    """
    Service for grading quiz submissions

    Strategy:
    - Each answer is matched to its question by id; unknown ids are dropped
    - Correct when the selected index equals the question's correct index
    - Score: sum of points of correct answers
    - Percentage: correct answers over question count ("questions" basis),
      or score over maximum score ("points" basis)
    """

    BASIS_QUESTIONS = "questions"
    BASIS_POINTS = "points"

    def grade_answers(
        self,
        questions: List[Dict[str, Any]],
        answers: List[Dict[str, Any]]
    ) -> Tuple[List[Dict[str, Any]], int, int]:
        """
        Grade submitted answers against the question set

        Args:
            questions: Quiz question dictionaries
            answers: [{question_id, selected_answer_index, time_spent_seconds}]

        Returns:
            Tuple of (graded_answers, score, correct_count)
        """
        questions_by_id = {q["id"]: q for q in questions}

        graded = []
        seen = set()
        score = 0
        correct_count = 0

        for answer in answers:
            question_id = answer.get("question_id")
            question = questions_by_id.get(question_id)

            if question is None:
                logger.debug(f"Dropping answer for unknown question {question_id}")
                continue

            # First answer per question wins
            if question_id in seen:
                continue
            seen.add(question_id)

            selected = answer.get("selected_answer_index")
            is_correct = selected is not None and selected == question["correct_answer_index"]

            if is_correct:
                score += question.get("points", 1)
                correct_count += 1

            graded.append({
                "question_id": question_id,
                "selected_answer_index": selected,
                "is_correct": is_correct,
                "time_spent_seconds": answer.get("time_spent_seconds", 0) or 0
            })

        return graded, score, correct_count

    def calculate_percentage(
        self,
        questions: List[Dict[str, Any]],
        score: int,
        correct_count: int,
        basis: Optional[str] = None
    ) -> float:
        """Percentage on the configured basis; 0 for an empty quiz"""
        basis = basis or settings.QUIZ_PERCENTAGE_BASIS

        if basis == self.BASIS_POINTS:
            max_score = sum(q.get("points", 1) for q in questions)
            return (score / max_score) * 100 if max_score > 0 else 0.0

        if basis != self.BASIS_QUESTIONS:
            raise ValueError(f"Unknown percentage basis: {basis}")

        return (correct_count / len(questions)) * 100 if questions else 0.0

    def grade_quiz(
        self,
        questions: List[Dict[str, Any]],
        answers: List[Dict[str, Any]],
        passing_score_percent: int,
        basis: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Grade a complete quiz submission

        Args:
            questions: Quiz question dictionaries
            answers: Submitted answers
            passing_score_percent: Minimum percentage for a pass
            basis: "questions" or "points" (default from settings)

        Returns:
            Dictionary with answers, score, max_score, percentage, passed
        """
        graded, score, correct_count = self.grade_answers(questions, answers)
        percentage = self.calculate_percentage(questions, score, correct_count, basis)
        passed = percentage >= passing_score_percent

        logger.info(
            f"Quiz graded: {correct_count}/{len(questions)} correct, "
            f"score={score}, percentage={percentage:.2f}, passed={passed}"
        )

        return {
            "answers": graded,
            "score": score,
            "max_score": sum(q.get("points", 1) for q in questions),
            "correct_count": correct_count,
            "percentage": round(percentage, 2),
            "passed": passed
        }


# Global instance
grading_service = GradingService()
