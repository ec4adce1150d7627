"""Question model."""

from enum import Enum as PyEnum

from sqlalchemy import Column, Enum, Float, ForeignKey, Index, Integer, String, Text, text

from quizhub.db.base import Base
from quizhub.models.base import ApprovableMixin, EntityMixin, JSONType


class QuestionType(str, PyEnum):
    """How a question is answered."""

    CHOICE = "choice"
    TYPE = "type"


class QuestionDifficulty(str, PyEnum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class Question(EntityMixin, ApprovableMixin, Base):
    """Question model."""

    __tablename__ = "questions"
    __table_args__ = (
        Index(
            "ux_questions_title_active",
            "title",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    category_id = Column(String(24), ForeignKey("categories.id"), nullable=False, index=True)
    type = Column(Enum(QuestionType, name="question_type", native_enum=False), nullable=False)
    difficulty = Column(Enum(QuestionDifficulty, name="question_difficulty", native_enum=False), nullable=False)
    title = Column(Text, nullable=False)  # HTML-escaped on write
    choices = Column(JSONType, nullable=True)  # [{title, correct?, explanation?}]
    answers = Column(JSONType, nullable=True)  # [{variants[], correct?, explanation?}]
    rating_mark_count = Column(Integer, nullable=False, default=0)
    rating_average_mark = Column(Float, nullable=True)
