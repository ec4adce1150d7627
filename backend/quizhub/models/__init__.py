"""Database models."""

# Import all models here so Alembic can detect them
from quizhub.models.activity import Activity
from quizhub.models.base import ApprovalStatus
from quizhub.models.category import Category
from quizhub.models.exam import Exam, ExamQuestion
from quizhub.models.question import Question, QuestionDifficulty, QuestionType
from quizhub.models.rating import RatingMark
from quizhub.models.user import User

__all__ = [
    "Activity",
    "ApprovalStatus",
    "Category",
    "Exam",
    "ExamQuestion",
    "Question",
    "QuestionDifficulty",
    "QuestionType",
    "RatingMark",
    "User",
]
