"""Category provider, workflow service and question counter sync."""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.common.object_id import normalize_object_id
from quizhub.common.pagination import CursorPaginationParams, Page, paginate
from quizhub.core.app_exceptions import CategoryNameTakenError, CategoryNotFoundError
from quizhub.core.logging import get_logger
from quizhub.core.permissions import Permission
from quizhub.events.dispatcher import EventDispatcher
from quizhub.events.types import Event
from quizhub.models.base import ApprovalStatus, utcnow
from quizhub.models.category import Category
from quizhub.models.question import Question
from quizhub.models.user import User
from quizhub.schemas.category import CategoryCreate, CategoryListQuery, CategoryUpdate
from quizhub.services.authorization import AuthorizationVerifier

logger = get_logger(__name__)


class CategoryProvider:
    """Fetch-by-id over non-deleted categories."""

    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: str) -> Category:
        """
        Get a category by id.

        Raises:
            ValidatorError: If the id is malformed
            CategoryNotFoundError: If absent or soft-deleted
        """
        category_id = normalize_object_id(category_id)
        category = self.db.execute(
            select(Category).where(Category.id == category_id, Category.deleted_at.is_(None))
        ).scalar_one_or_none()
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category


class CategoryService:
    """Category use cases."""

    def __init__(
        self,
        db: Session,
        verifier: AuthorizationVerifier,
        dispatcher: EventDispatcher,
        provider: CategoryProvider | None = None,
    ):
        self.db = db
        self.verifier = verifier
        self.dispatcher = dispatcher
        self.provider = provider or CategoryProvider(db)

    def _verify_name_not_taken(self, name: str, ignore_id: str | None = None) -> None:
        stmt = select(Category.id).where(Category.name == name, Category.deleted_at.is_(None))
        if ignore_id is not None:
            stmt = stmt.where(Category.id != ignore_id)
        if self.db.execute(stmt).first() is not None:
            raise CategoryNameTakenError(name)

    def _commit(self, name: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise CategoryNameTakenError(name) from None

    async def create_category(self, data: CategoryCreate, initiator: User) -> Category:
        """Create a pending category owned by its creator."""
        self.verifier.verify_authorization(initiator, Permission.CREATE_CATEGORY)
        self._verify_name_not_taken(data.name)

        category = Category(
            name=data.name,
            required_score=data.required_score,
            creator_id=initiator.id,
            owner_id=initiator.id,
            approval_status=ApprovalStatus.PENDING,
        )
        self.db.add(category)
        self._commit(data.name)
        logger.info("Category created", extra={"category_id": category.id, "user_id": initiator.id})

        await self.dispatcher.dispatch(self.db, Event.CATEGORY_CREATED, {"category": category, "user": initiator})
        return category

    async def replace_category(self, category_id: str, data: CategoryCreate, initiator: User) -> Category:
        """Overwrite every editable field."""
        return await self._apply_update(category_id, data.model_dump(), initiator)

    async def update_category(self, category_id: str, data: CategoryUpdate, initiator: User) -> Category:
        """Change only the fields that were sent."""
        changes = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}
        return await self._apply_update(category_id, changes, initiator)

    async def _apply_update(self, category_id: str, changes: dict, initiator: User) -> Category:
        category = self.provider.get_category(category_id)
        self.verifier.verify_authorization(initiator, Permission.UPDATE_CATEGORY, category)

        if "name" in changes and changes["name"] != category.name:
            self._verify_name_not_taken(changes["name"], ignore_id=category.id)
        for key, value in changes.items():
            setattr(category, key, value)
        category.updated_at = utcnow()
        self._commit(category.name)

        await self.dispatcher.dispatch(self.db, Event.CATEGORY_UPDATED, {"category": category, "user": initiator})
        return category

    async def toggle_category_approve(self, category_id: str, initiator: User) -> Category:
        """Approve a pending category or send an approved one back to its creator."""
        category = self.provider.get_category(category_id)
        self.verifier.verify_authorization(initiator, Permission.APPROVE_CATEGORY)

        approved = category.toggle_approval()
        category.updated_at = utcnow()
        self.db.commit()
        logger.info("Category approval toggled", extra={"category_id": category.id, "approved": approved})

        await self.dispatcher.dispatch(
            self.db, Event.CATEGORY_APPROVE_TOGGLED, {"category": category, "user": initiator}
        )
        return category

    async def delete_category(self, category_id: str, initiator: User) -> Category:
        """Soft-delete a category together with its questions."""
        category = self.provider.get_category(category_id)
        self.verifier.verify_authorization(initiator, Permission.DELETE_CATEGORY, category)

        now = utcnow()
        category.deleted_at = now
        for question in self.db.execute(
            select(Question).where(Question.category_id == category.id, Question.deleted_at.is_(None))
        ).scalars():
            question.deleted_at = now
        self.db.commit()
        logger.info("Category deleted", extra={"category_id": category.id, "user_id": initiator.id})

        await self.dispatcher.dispatch(self.db, Event.CATEGORY_DELETED, {"category": category, "user": initiator})
        return category

    async def list_categories(
        self,
        query: CategoryListQuery,
        params: CursorPaginationParams,
        initiator: User | None = None,
    ) -> Page[Category]:
        stmt = select(Category).where(Category.deleted_at.is_(None))
        if query.search:
            stmt = stmt.where(Category.name.ilike(f"%{query.search}%"))
        if query.approved is not None:
            status = ApprovalStatus.APPROVED if query.approved else ApprovalStatus.PENDING
            stmt = stmt.where(Category.approval_status == status)
        if query.creator is not None and initiator is not None:
            if query.creator == "i":
                stmt = stmt.where(Category.creator_id == initiator.id)
            else:
                stmt = stmt.where(Category.creator_id != initiator.id)
        return paginate(self.db, stmt, Category.id, params)

    async def list_own_categories(self, params: CursorPaginationParams, initiator: User) -> Page[Category]:
        stmt = select(Category).where(Category.deleted_at.is_(None), Category.creator_id == initiator.id)
        return paginate(self.db, stmt, Category.id, params)


class CategoryQuestionCountSyncer:
    """Recomputes a category's question counters from its questions."""

    def __init__(self, db: Session):
        self.db = db

    def sync_question_counts(self, category_id: str) -> Category | None:
        category = self.db.get(Category, category_id)
        if category is None:
            return None

        base = select(func.count(Question.id)).where(
            Question.category_id == category_id, Question.deleted_at.is_(None)
        )
        category.question_count = self.db.execute(base).scalar_one()
        category.approved_question_count = self.db.execute(
            base.where(Question.approval_status == ApprovalStatus.APPROVED)
        ).scalar_one()
        self.db.commit()
        return category
