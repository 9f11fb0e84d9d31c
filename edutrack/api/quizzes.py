"""
Quiz authoring and attempt API endpoints
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from edutrack.api.deps import get_current_user, require
from edutrack.database import get_db
from edutrack.errors import NotFoundError
from edutrack.models import Quiz
from edutrack.permissions import Capability, has_capability
from edutrack.schemas.attempt import (
    AttemptRecord,
    AttemptStart,
    AttemptStartResponse,
    AttemptSubmission,
)
from edutrack.schemas.quiz import (
    LearnerQuestion,
    LearnerQuizResponse,
    QuizCreate,
    QuizResponse,
    QuizUpdate,
)
from edutrack.schemas.user import CurrentUser
from edutrack.services.attempt_service import attempt_service
from edutrack.services.quiz_service import quiz_service
from edutrack.utils.cache import cache_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


def _to_response(quiz: Quiz) -> QuizResponse:
    return QuizResponse(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        course_id=quiz.course_id,
        questions=quiz.questions,
        time_limit_minutes=quiz.time_limit_minutes,
        passing_score_percent=quiz.passing_score_percent,
        max_attempts=quiz.max_attempts,
        is_active=quiz.is_active,
        created_by=quiz.created_by,
        created_at=quiz.created_at,
        updated_at=quiz.updated_at,
        total_questions=len(quiz.questions),
        total_points=quiz.max_score,
    )


def _to_learner_view(quiz: QuizResponse) -> LearnerQuizResponse:
    """Strip answer keys and explanations"""
    return LearnerQuizResponse(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        course_id=quiz.course_id,
        questions=[
            LearnerQuestion(
                id=q.id,
                question=q.question,
                options=q.options,
                points=q.points,
                difficulty=q.difficulty,
            )
            for q in quiz.questions
        ],
        time_limit_minutes=quiz.time_limit_minutes,
        passing_score_percent=quiz.passing_score_percent,
        max_attempts=quiz.max_attempts,
        total_questions=quiz.total_questions,
        total_points=quiz.total_points,
    )


def _sees_answer_keys(user: CurrentUser, quiz: QuizResponse) -> bool:
    return has_capability(user.role, Capability.VIEW_ALL_QUIZZES) or quiz.created_by == user.user_id


@router.post("", response_model=QuizResponse, status_code=201)
async def create_quiz(
    payload: QuizCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.CREATE_QUIZ)),
):
    """
    Create a quiz

    - Validates questions (2-6 options, correct index in range, 1-10 points)
    - Caps max_attempts by the creator's role
    """
    quiz = quiz_service.create_quiz(db, payload, user)
    return _to_response(quiz)


@router.get("", response_model=None)
async def list_quizzes(
    course_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.READ_QUIZ)),
):
    """
    List quizzes, newest first

    Staff and authors get full definitions; other quizzes are listed only
    when active, without answer keys.
    """
    quizzes = quiz_service.list_quizzes(db, course_id=course_id, include_inactive=True)

    visible = []
    for quiz in map(_to_response, quizzes):
        if _sees_answer_keys(user, quiz):
            visible.append(quiz)
        elif quiz.is_active:
            visible.append(_to_learner_view(quiz))
    return visible


@router.get("/{quiz_id}", response_model=None)
async def get_quiz(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.READ_QUIZ)),
):
    """
    Get a quiz

    - Checks cache first
    - Instructors, admins and the author get answer keys
    """
    key = cache_service.quiz_key(str(quiz_id))
    cached = cache_service.get(key)

    if cached:
        quiz = QuizResponse(**cached)
    else:
        quiz = _to_response(quiz_service.get_quiz(db, quiz_id))
        cache_service.set(key, quiz.model_dump(mode="json"))

    if _sees_answer_keys(user, quiz):
        return quiz

    if not quiz.is_active:
        raise NotFoundError("Quiz not found")
    return _to_learner_view(quiz)


@router.patch("/{quiz_id}", response_model=QuizResponse)
async def update_quiz(
    quiz_id: UUID,
    changes: QuizUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.UPDATE_QUIZ)),
):
    quiz = quiz_service.update_quiz(db, quiz_id, changes, user)
    cache_service.clear_quiz_cache(str(quiz_id))
    return _to_response(quiz)


@router.delete("/{quiz_id}", status_code=204)
async def delete_quiz(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.DELETE_QUIZ)),
):
    quiz_service.delete_quiz(db, quiz_id, user)
    cache_service.clear_quiz_cache(str(quiz_id))
    return Response(status_code=204)


@router.post("/{quiz_id}/attempts", response_model=AttemptStartResponse, status_code=201)
async def start_attempt(
    quiz_id: UUID,
    payload: Optional[AttemptStart] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.TAKE_QUIZ)),
):
    """
    Start a quiz attempt

    Rejected with 409 when the quiz is inactive or the caller has used
    all of its attempts.
    """
    attempt = attempt_service.start_attempt(
        db,
        quiz_id=quiz_id,
        user_id=user.user_id,
        course_id=payload.course_id if payload else None,
    )
    return AttemptStartResponse(attempt_id=attempt.id, attempt_number=attempt.attempt_number)


@router.get("/{quiz_id}/attempts", response_model=List[AttemptRecord])
async def list_attempts(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """The caller's attempts on this quiz, newest first"""
    return attempt_service.list_attempts(db, quiz_id, user.user_id)


@router.post("/{quiz_id}/attempts/{attempt_id}/submit", response_model=AttemptRecord)
async def submit_attempt(
    quiz_id: UUID,
    attempt_id: UUID,
    submission: AttemptSubmission,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.TAKE_QUIZ)),
):
    """
    Submit and grade an attempt

    Grading:
    - Exact match on the selected option index
    - Score sums points of correct answers
    - Passed when the percentage reaches the quiz's passing score

    A second submission of the same attempt is rejected with 409.
    """
    logger.info(f"Grading attempt {attempt_id} of quiz {quiz_id} for user {user.user_id}")

    attempt = attempt_service.submit_attempt(
        db,
        attempt_id=attempt_id,
        answers=[a.model_dump() for a in submission.answers],
        total_time_spent_seconds=submission.total_time_spent_seconds,
        user_id=user.user_id,
        quiz_id=quiz_id,
    )
    cache_service.clear_stats(str(quiz_id))

    return attempt
