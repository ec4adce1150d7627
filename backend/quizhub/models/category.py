"""Category model."""

from sqlalchemy import Column, Float, Index, Integer, String, text

from quizhub.db.base import Base
from quizhub.models.base import ApprovableMixin, EntityMixin


class Category(EntityMixin, ApprovableMixin, Base):
    """A named, scored grouping of questions."""

    __tablename__ = "categories"
    __table_args__ = (
        Index(
            "ux_categories_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    name = Column(String(100), nullable=False, index=True)
    required_score = Column(Integer, nullable=False, default=0)  # 0-100
    question_count = Column(Integer, nullable=False, default=0)
    approved_question_count = Column(Integer, nullable=False, default=0)
    rating_mark_count = Column(Integer, nullable=False, default=0)
    rating_average_mark = Column(Float, nullable=True)
