"""Activity log: records and lists audit entries."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from quizhub.common.pagination import CursorPaginationParams, Page, paginate
from quizhub.core.logging import get_logger
from quizhub.models.activity import Activity
from quizhub.models.category import Category

logger = get_logger(__name__)


class ActivityService:
    def __init__(self, db: Session):
        self.db = db

    async def create_category_activity(
        self,
        category: Category,
        event: str,
        creator_id: str | None = None,
    ) -> Activity:
        """Record ``event`` for ``category``, snapshotting its current name."""
        activity = Activity(
            event=getattr(event, "value", event),
            category_id=category.id,
            category_name=category.name,
            creator_id=creator_id,
        )
        self.db.add(activity)
        self.db.commit()
        logger.info("Activity recorded", extra={"event": activity.event, "category_id": category.id})
        return activity

    async def list_activities(self, params: CursorPaginationParams) -> Page[Activity]:
        """Newest first unless the caller asks for ascending order."""
        stmt = select(Activity).where(Activity.deleted_at.is_(None))
        return paginate(self.db, stmt, Activity.id, params)
