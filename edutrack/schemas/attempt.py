"""
Pydantic schemas for quiz attempts
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class AttemptStart(BaseModel):
    """Defaults to the quiz's own course when omitted"""
    course_id: Optional[str] = Field(None, min_length=1, max_length=128)


class AttemptStartResponse(BaseModel):
    attempt_id: UUID
    attempt_number: int


class AnswerSubmission(BaseModel):
    """One answer as sent by the learner"""
    question_id: str
    selected_answer_index: Optional[int] = Field(None, ge=0, description="None when left blank")
    time_spent_seconds: int = Field(0, ge=0)


class AttemptSubmission(BaseModel):
    """Schema for quiz submission"""
    answers: List[AnswerSubmission]
    total_time_spent_seconds: Optional[int] = Field(
        None, ge=0, description="Defaults to the sum of per-answer times"
    )


class GradedAnswer(BaseModel):
    question_id: str
    selected_answer_index: Optional[int] = None
    is_correct: bool
    time_spent_seconds: int


class AttemptRecord(BaseModel):
    """Stored attempt, graded or not"""
    id: UUID
    quiz_id: UUID
    user_id: str
    course_id: str
    attempt_number: int
    answers: List[GradedAnswer]
    score: int
    max_score: int
    percentage: float
    passed: bool
    time_spent_seconds: int
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
