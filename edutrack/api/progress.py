"""
Lesson progress API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
import logging

from edutrack.api.deps import get_current_user, require
from edutrack.database import get_db
from edutrack.permissions import Capability
from edutrack.schemas.progress import LessonCompletion, ProgressRecord
from edutrack.schemas.user import CurrentUser
from edutrack.services.progress_service import progress_service

router = APIRouter(prefix="/api", tags=["progress"])
logger = logging.getLogger(__name__)


@router.post(
    "/courses/{course_id}/lessons/{lesson_id}/complete",
    response_model=ProgressRecord
)
async def complete_lesson(
    course_id: str,
    lesson_id: str,
    completion: LessonCompletion,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require(Capability.TRACK_PROGRESS))
):
    """
    Mark a lesson as completed for the caller

    - Creates the course progress record on first completion
    - Repeating a completed lesson changes nothing
    - completed_at is stamped the first time the course reaches 100%
    """
    return progress_service.mark_lesson_complete(
        db,
        user_id=user.user_id,
        course_id=course_id,
        lesson_id=lesson_id,
        total_lessons=completion.total_lessons
    )


@router.get("/users/me/progress", response_model=List[ProgressRecord])
async def get_my_progress(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """All course progress records of the caller"""
    return progress_service.get_progress_for_user(db, user.user_id)
