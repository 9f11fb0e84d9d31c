"""
Pydantic schemas for quiz authoring requests and responses
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class QuizQuestion(BaseModel):
    """Single-choice question"""
    id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1, description="Prompt text")
    options: List[str] = Field(..., min_length=2, max_length=6)
    correct_answer_index: int = Field(..., ge=0)
    points: int = Field(1, ge=1, le=10)
    difficulty: str = Field("medium", pattern="^(easy|medium|hard)$")
    explanation: Optional[str] = None

    @field_validator("options")
    @classmethod
    def options_not_blank(cls, options: List[str]) -> List[str]:
        if any(not option.strip() for option in options):
            raise ValueError("Option text is required")
        return options

    @model_validator(mode="after")
    def correct_answer_in_range(self) -> "QuizQuestion":
        if self.correct_answer_index >= len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} is out of range "
                f"for {len(self.options)} options"
            )
        return self


def _unique_question_ids(questions: List[QuizQuestion]) -> List[QuizQuestion]:
    ids = [q.id for q in questions]
    if len(ids) != len(set(ids)):
        raise ValueError("Question ids must be unique within a quiz")
    return questions


class QuizCreate(BaseModel):
    """Request schema for quiz creation"""
    title: str = Field(..., min_length=5, max_length=255)
    description: str = Field(..., min_length=10)
    course_id: str = Field(..., min_length=1, max_length=128)
    questions: List[QuizQuestion] = Field(..., min_length=1)
    time_limit_minutes: Optional[int] = Field(None, ge=1, le=300)
    passing_score_percent: int = Field(..., ge=1, le=100)
    max_attempts: int = Field(..., ge=1, le=20)
    is_active: bool = True

    @field_validator("questions")
    @classmethod
    def unique_ids(cls, questions: List[QuizQuestion]) -> List[QuizQuestion]:
        return _unique_question_ids(questions)


class QuizUpdate(BaseModel):
    """Partial update; omitted fields are left untouched"""
    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    questions: Optional[List[QuizQuestion]] = Field(None, min_length=1)
    time_limit_minutes: Optional[int] = Field(None, ge=1, le=300)
    passing_score_percent: Optional[int] = Field(None, ge=1, le=100)
    max_attempts: Optional[int] = Field(None, ge=1, le=20)
    is_active: Optional[bool] = None

    @field_validator("questions")
    @classmethod
    def unique_ids(cls, questions: Optional[List[QuizQuestion]]):
        return _unique_question_ids(questions) if questions is not None else questions


class QuizResponse(BaseModel):
    """Full quiz definition, answer keys included"""
    id: UUID
    title: str
    description: Optional[str] = None
    course_id: str
    questions: List[QuizQuestion]
    time_limit_minutes: Optional[int] = None
    passing_score_percent: int
    max_attempts: int
    is_active: bool
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_questions: int
    total_points: int

    class Config:
        from_attributes = True


class LearnerQuestion(BaseModel):
    """Question as shown while taking a quiz"""
    id: str
    question: str
    options: List[str]
    points: int
    difficulty: str


class LearnerQuizResponse(BaseModel):
    """Quiz without answer keys"""
    id: UUID
    title: str
    description: Optional[str] = None
    course_id: str
    questions: List[LearnerQuestion]
    time_limit_minutes: Optional[int] = None
    passing_score_percent: int
    max_attempts: int
    total_questions: int
    total_points: int
