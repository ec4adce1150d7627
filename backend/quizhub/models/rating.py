"""Rating marks: one 1-5 mark per (creator, target)."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, text

from quizhub.db.base import Base
from quizhub.models.base import EntityMixin


class RatingMark(EntityMixin, Base):
    """A single user's mark for a category or a question."""

    __tablename__ = "rating_marks"
    __table_args__ = (
        CheckConstraint("mark >= 1 AND mark <= 5", name="ck_rating_marks_mark_range"),
        CheckConstraint(
            "(category_id IS NULL) <> (question_id IS NULL)",
            name="ck_rating_marks_single_target",
        ),
        Index(
            "ux_rating_marks_creator_category",
            "creator_id",
            "category_id",
            unique=True,
            postgresql_where=text("category_id IS NOT NULL"),
            sqlite_where=text("category_id IS NOT NULL"),
        ),
        Index(
            "ux_rating_marks_creator_question",
            "creator_id",
            "question_id",
            unique=True,
            postgresql_where=text("question_id IS NOT NULL"),
            sqlite_where=text("question_id IS NOT NULL"),
        ),
    )

    category_id = Column(String(24), ForeignKey("categories.id"), nullable=True, index=True)
    question_id = Column(String(24), ForeignKey("questions.id"), nullable=True, index=True)
    mark = Column(Integer, nullable=False)

    @property
    def target_id(self) -> str:
        return self.category_id or self.question_id
