"""Activity model: immutable audit records of domain events."""

from sqlalchemy import Column, String

from quizhub.db.base import Base
from quizhub.models.base import EntityMixin


class Activity(EntityMixin, Base):
    """Audit record with a category name snapshot for display without a join."""

    __tablename__ = "activities"

    event = Column(String(64), nullable=False, index=True)
    category_id = Column(String(24), nullable=True, index=True)
    category_name = Column(String(100), nullable=True)
