"""
Quiz statistics and achievements API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from edutrack.api.deps import get_current_user, require
from edutrack.database import get_db
from edutrack.errors import PermissionDenied
from edutrack.permissions import Capability, can_modify_owned
from edutrack.schemas.analytics import Achievement, QuizStats
from edutrack.schemas.user import CurrentUser
from edutrack.services.analytics_service import analytics_service
from edutrack.services.progress_service import progress_service
from edutrack.services.quiz_service import quiz_service
from edutrack.utils.cache import cache_service

router = APIRouter(prefix="/api", tags=["analytics"])
logger = logging.getLogger(__name__)


@router.get("/quizzes/{quiz_id}/stats", response_model=QuizStats)
async def get_quiz_stats(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.VIEW_ANALYTICS))
):
    """
    Get statistics for a quiz

    Returns:
    - Submitted attempt count and pass rate
    - Average percentage and time spent (seconds)
    - Per-question correct/total answers
    """
    quiz = quiz_service.get_quiz(db, quiz_id)
    if not can_modify_owned(user.role, Capability.VIEW_ANALYTICS, user.user_id, quiz.created_by):
        raise PermissionDenied("You can only view statistics for your own quizzes.")

    key = cache_service.stats_key(str(quiz_id))
    cached = cache_service.get(key)
    if cached:
        return QuizStats(**cached)

    logger.info(f"Computing statistics for quiz {quiz_id}")
    stats = analytics_service.get_quiz_stats(db, quiz_id)
    cache_service.set(key, stats)

    return QuizStats(**stats)


@router.get("/users/me/achievements", response_model=List[Achievement])
async def get_my_achievements(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Achievements earned from the caller's course progress"""
    records = progress_service.get_progress_for_user(db, user.user_id)
    return analytics_service.get_achievements(records)
