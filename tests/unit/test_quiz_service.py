"""Quiz authoring service and schema validation tests."""
import pytest
from pydantic import ValidationError

from edutrack.errors import NotFoundError, PermissionDenied, PreconditionViolation
from edutrack.models import QuizAttempt
from edutrack.permissions import Role
from edutrack.schemas.quiz import QuizCreate, QuizQuestion, QuizUpdate
from edutrack.schemas.user import CurrentUser
from edutrack.services.attempt_service import attempt_service
from edutrack.services.quiz_service import quiz_service

INSTRUCTOR = CurrentUser(user_id="instructor-1", role=Role.INSTRUCTOR)
OTHER_INSTRUCTOR = CurrentUser(user_id="instructor-2", role=Role.INSTRUCTOR)
STUDENT = CurrentUser(user_id="student-1", role=Role.STUDENT)
ADMIN = CurrentUser(user_id="admin-1", role=Role.ADMIN)


def question(qid="q1", **overrides):
    data = {
        "id": qid,
        "question": "What is 2 + 2?",
        "options": ["3", "4", "5"],
        "correct_answer_index": 1,
        "points": 2,
    }
    data.update(overrides)
    return data


def quiz_payload(**overrides):
    data = {
        "title": "Arithmetic basics",
        "description": "Addition and subtraction warm-up",
        "course_id": "math-101",
        "questions": [question("q1"), question("q2", correct_answer_index=0)],
        "passing_score_percent": 60,
        "max_attempts": 3,
    }
    data.update(overrides)
    return QuizCreate(**data)


@pytest.mark.unit
class TestQuestionValidation:
    def test_defaults(self):
        q = QuizQuestion(**question())
        assert q.difficulty == "medium"
        assert q.points == 2

    def test_needs_two_options(self):
        with pytest.raises(ValidationError):
            QuizQuestion(**question(options=["only"]))

    def test_at_most_six_options(self):
        with pytest.raises(ValidationError):
            QuizQuestion(**question(options=[str(i) for i in range(7)]))

    def test_correct_index_in_range(self):
        with pytest.raises(ValidationError):
            QuizQuestion(**question(correct_answer_index=3))

    def test_points_bounds(self):
        with pytest.raises(ValidationError):
            QuizQuestion(**question(points=0))
        with pytest.raises(ValidationError):
            QuizQuestion(**question(points=11))

    def test_blank_option_rejected(self):
        with pytest.raises(ValidationError):
            QuizQuestion(**question(options=["a", "  "]))

    def test_question_ids_unique(self):
        with pytest.raises(ValidationError):
            quiz_payload(questions=[question("q1"), question("q1")])

    def test_quiz_bounds(self):
        with pytest.raises(ValidationError):
            quiz_payload(passing_score_percent=0)
        with pytest.raises(ValidationError):
            quiz_payload(max_attempts=21)
        with pytest.raises(ValidationError):
            quiz_payload(time_limit_minutes=301)
        with pytest.raises(ValidationError):
            quiz_payload(title="Quiz")


@pytest.mark.unit
class TestQuizService:
    def test_create_and_get(self, db_session):
        quiz = quiz_service.create_quiz(db_session, quiz_payload(), INSTRUCTOR)

        loaded = quiz_service.get_quiz(db_session, quiz.id)
        assert loaded.created_by == "instructor-1"
        assert loaded.max_score == 4
        assert loaded.questions[0]["difficulty"] == "medium"
        assert loaded.is_active is True

    def test_role_cap_on_max_attempts(self, db_session):
        with pytest.raises(PreconditionViolation):
            quiz_service.create_quiz(db_session, quiz_payload(max_attempts=6), STUDENT)
        with pytest.raises(PreconditionViolation):
            quiz_service.create_quiz(db_session, quiz_payload(max_attempts=16), INSTRUCTOR)

        assert quiz_service.create_quiz(db_session, quiz_payload(max_attempts=5), STUDENT)
        assert quiz_service.create_quiz(db_session, quiz_payload(max_attempts=20), ADMIN)

    def test_list_hides_inactive_by_default(self, db_session):
        quiz_service.create_quiz(db_session, quiz_payload(), INSTRUCTOR)
        quiz_service.create_quiz(db_session, quiz_payload(is_active=False), INSTRUCTOR)
        quiz_service.create_quiz(db_session, quiz_payload(course_id="other"), INSTRUCTOR)

        assert len(quiz_service.list_quizzes(db_session, course_id="math-101")) == 1
        assert len(quiz_service.list_quizzes(db_session, course_id="math-101", include_inactive=True)) == 2
        assert len(quiz_service.list_quizzes(db_session)) == 2

    def test_update_by_owner(self, db_session):
        quiz = quiz_service.create_quiz(db_session, quiz_payload(time_limit_minutes=20), INSTRUCTOR)

        updated = quiz_service.update_quiz(
            db_session,
            quiz.id,
            QuizUpdate(is_active=False, time_limit_minutes=None, title=None),
            INSTRUCTOR,
        )

        assert updated.is_active is False
        assert updated.time_limit_minutes is None
        assert updated.title == "Arithmetic basics"

    def test_update_by_other_instructor_denied(self, db_session):
        quiz = quiz_service.create_quiz(db_session, quiz_payload(), INSTRUCTOR)
        with pytest.raises(PermissionDenied):
            quiz_service.update_quiz(db_session, quiz.id, QuizUpdate(is_active=False), OTHER_INSTRUCTOR)

    def test_admin_can_update_any_quiz(self, db_session):
        quiz = quiz_service.create_quiz(db_session, quiz_payload(), INSTRUCTOR)
        updated = quiz_service.update_quiz(db_session, quiz.id, QuizUpdate(max_attempts=18), ADMIN)
        assert updated.max_attempts == 18

    def test_update_checks_role_cap(self, db_session):
        quiz = quiz_service.create_quiz(db_session, quiz_payload(), INSTRUCTOR)
        with pytest.raises(PreconditionViolation):
            quiz_service.update_quiz(db_session, quiz.id, QuizUpdate(max_attempts=18), INSTRUCTOR)

    def test_delete_removes_attempts(self, db_session):
        quiz = quiz_service.create_quiz(db_session, quiz_payload(), INSTRUCTOR)
        attempt_service.start_attempt(db_session, quiz.id, "student-1")

        quiz_service.delete_quiz(db_session, quiz.id, INSTRUCTOR)

        with pytest.raises(NotFoundError):
            quiz_service.get_quiz(db_session, quiz.id)
        assert db_session.query(QuizAttempt).count() == 0
