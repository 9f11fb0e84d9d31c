"""
Pydantic schemas for lesson progress
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class LessonCompletion(BaseModel):
    """Body of a lesson-completion event"""
    total_lessons: int = Field(..., ge=0, description="Number of lessons in the course")


class ProgressRecord(BaseModel):
    """Per-user-per-course completion state"""
    id: UUID
    user_id: str
    course_id: str
    completed_lesson_ids: List[str]
    percentage: int
    completed: bool
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
