"""
Database models package
"""
from edutrack.models.user_progress import UserProgress
from edutrack.models.quiz import Quiz
from edutrack.models.quiz_attempt import QuizAttempt

__all__ = ["UserProgress", "Quiz", "QuizAttempt"]
