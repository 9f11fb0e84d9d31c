"""Unit tests for the pure grading logic."""
import pytest

from edutrack.services.grading_service import grading_service


def make_questions(points=(10, 10, 10)):
    return [
        {
            "id": f"q{i}",
            "question": f"Question {i}?",
            "options": ["A", "B", "C"],
            "correct_answer_index": 1,
            "points": p,
        }
        for i, p in enumerate(points, start=1)
    ]


def answer(question_id, selected, seconds=5):
    return {"question_id": question_id, "selected_answer_index": selected, "time_spent_seconds": seconds}


@pytest.mark.unit
class TestGradeQuiz:
    def test_two_of_three_correct_fails_at_seventy(self):
        result = grading_service.grade_quiz(
            make_questions(),
            [answer("q1", 1), answer("q2", 1), answer("q3", 0)],
            passing_score_percent=70,
            basis="questions",
        )
        assert result["score"] == 20
        assert result["percentage"] == pytest.approx(66.67)
        assert result["passed"] is False

    def test_all_correct_passes(self):
        result = grading_service.grade_quiz(
            make_questions(),
            [answer("q1", 1), answer("q2", 1), answer("q3", 1)],
            passing_score_percent=70,
            basis="questions",
        )
        assert result["score"] == 30
        assert result["max_score"] == 30
        assert result["percentage"] == 100
        assert result["passed"] is True

    def test_pass_threshold_is_inclusive(self):
        result = grading_service.grade_quiz(
            make_questions((1, 1, 1, 1)),
            [answer("q1", 1), answer("q2", 1), answer("q3", 1), answer("q4", 2)],
            passing_score_percent=75,
            basis="questions",
        )
        assert result["percentage"] == 75
        assert result["passed"] is True

    def test_unknown_question_is_dropped(self):
        result = grading_service.grade_quiz(
            make_questions(),
            [answer("q1", 1), answer("nope", 1)],
            passing_score_percent=50,
            basis="questions",
        )
        assert [a["question_id"] for a in result["answers"]] == ["q1"]
        assert result["score"] == 10
        assert result["correct_count"] == 1

    def test_missing_answers_count_against_question_total(self):
        result = grading_service.grade_quiz(
            make_questions(),
            [answer("q1", 1)],
            passing_score_percent=30,
            basis="questions",
        )
        assert len(result["answers"]) == 1
        assert result["percentage"] == pytest.approx(33.33)
        assert result["passed"] is True

    def test_blank_selection_is_incorrect(self):
        result = grading_service.grade_quiz(
            make_questions(),
            [answer("q1", None)],
            passing_score_percent=50,
            basis="questions",
        )
        assert result["answers"][0]["is_correct"] is False
        assert result["score"] == 0

    def test_duplicate_answer_keeps_first(self):
        result = grading_service.grade_quiz(
            make_questions(),
            [answer("q1", 0), answer("q1", 1)],
            passing_score_percent=50,
            basis="questions",
        )
        assert len(result["answers"]) == 1
        assert result["answers"][0]["selected_answer_index"] == 0
        assert result["score"] == 0

    def test_empty_quiz_scores_zero(self):
        result = grading_service.grade_quiz([], [], passing_score_percent=1, basis="questions")
        assert result["percentage"] == 0
        assert result["passed"] is False


@pytest.mark.unit
class TestPercentageBasis:
    def test_unequal_points_diverge_between_bases(self):
        questions = make_questions((20,) + (1,) * 9)
        answers = [answer("q1", 1)] + [answer(f"q{i}", 0) for i in range(2, 11)]

        by_questions = grading_service.grade_quiz(questions, answers, 50, basis="questions")
        by_points = grading_service.grade_quiz(questions, answers, 50, basis="points")

        assert by_questions["score"] == by_points["score"] == 20
        assert by_questions["percentage"] == 10
        assert by_points["percentage"] == pytest.approx(68.97)
        assert by_questions["passed"] is False
        assert by_points["passed"] is True

    def test_unknown_basis_rejected(self):
        with pytest.raises(ValueError):
            grading_service.calculate_percentage(make_questions(), 10, 1, basis="weighted")
