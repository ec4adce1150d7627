"""User model."""

from sqlalchemy import Column, Index, String, text

from quizhub.core.permissions import DEFAULT_USER_PERMISSIONS
from quizhub.db.base import Base
from quizhub.models.base import EntityMixin, JSONType

RATING_MARK_BUCKETS = 5


def empty_rating_marks() -> list[list[str]]:
    """Five buckets; index i holds ids rated with mark i + 1."""
    return [[] for _ in range(RATING_MARK_BUCKETS)]


class User(EntityMixin, Base):
    """User model."""

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "ux_users_email_active",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    permissions = Column(JSONType, nullable=False, default=lambda: list(DEFAULT_USER_PERMISSIONS))
    # Denormalized lookups kept in sync by event subscribers
    category_rating_marks = Column(JSONType, nullable=False, default=empty_rating_marks)
    question_rating_marks = Column(JSONType, nullable=False, default=empty_rating_marks)
    category_exams = Column(JSONType, nullable=False, default=dict)  # category id -> active exam id
