"""
Pydantic schemas for analytics endpoints
"""
from pydantic import BaseModel
from typing import List


class QuestionStats(BaseModel):
    """Answer statistics for a single question"""
    question_id: str
    correct_answers: int
    total_answers: int
    average_time_spent: float
    difficulty: str


class QuizStats(BaseModel):
    """Aggregate statistics over submitted attempts"""
    total_attempts: int
    average_score: float
    pass_rate: float
    average_time_spent: float
    question_stats: List[QuestionStats]


class Achievement(BaseModel):
    id: str
    name: str
    description: str
