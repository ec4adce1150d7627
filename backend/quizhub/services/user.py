"""User provider, user/me workflows and the user-side denormalized syncers."""

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.common.object_id import new_object_id, normalize_object_id
from quizhub.common.pagination import CursorPaginationParams, Page, paginate
from quizhub.core.app_exceptions import UserEmailTakenError, UserNotFoundError
from quizhub.core.logging import get_logger
from quizhub.core.permissions import DEFAULT_USER_PERMISSIONS, Permission
from quizhub.core.security import hash_password
from quizhub.models.base import utcnow
from quizhub.models.exam import Exam
from quizhub.models.user import User
from quizhub.schemas.user import MeCreate, MeUpdate, UserCreate, UserListQuery, UserUpdate
from quizhub.services.authorization import AuthorizationVerifier

logger = get_logger(__name__)


class UserProvider:
    """Fetch-by-id over non-deleted users."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> User:
        """
        Raises:
            ValidatorError: If the id is malformed
            UserNotFoundError: If absent or soft-deleted
        """
        user_id = normalize_object_id(user_id)
        user = self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        ).scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.execute(
            select(User).where(User.email == email.lower().strip(), User.deleted_at.is_(None))
        ).scalar_one_or_none()


class UserService:
    """Registration, profile and admin user management."""

    def __init__(self, db: Session, verifier: AuthorizationVerifier, provider: UserProvider | None = None):
        self.db = db
        self.verifier = verifier
        self.provider = provider or UserProvider(db)

    def can_view_email(self, user: User, viewer: User | None) -> bool:
        return self.verifier.is_authorized(viewer, Permission.GET_USER_EMAIL, user)

    def can_view_permissions(self, user: User, viewer: User | None) -> bool:
        return self.verifier.is_authorized(viewer, Permission.GET_USER_PERMISSIONS, user)

    def _verify_email_not_taken(self, email: str, ignore_id: str | None = None) -> None:
        existing = self.provider.find_by_email(email)
        if existing is not None and existing.id != ignore_id:
            raise UserEmailTakenError(email)

    def _commit(self, email: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise UserEmailTakenError(email) from None

    def _build_user(self, data: MeCreate, permissions: list[str], creator_id: str | None) -> User:
        self._verify_email_not_taken(data.email)
        user_id = new_object_id()
        return User(
            id=user_id,
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            permissions=permissions,
            creator_id=creator_id or user_id,
            owner_id=user_id,
        )

    async def create_me(self, data: MeCreate) -> User:
        """Self-registration with the default permissions."""
        user = self._build_user(data, list(DEFAULT_USER_PERMISSIONS), creator_id=None)
        self.db.add(user)
        self._commit(data.email)
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def create_user(self, data: UserCreate, initiator: User) -> User:
        self.verifier.verify_authorization(initiator, Permission.CREATE_USER)
        user = self._build_user(data, [p.value for p in data.permissions], creator_id=initiator.id)
        self.db.add(user)
        self._commit(data.email)
        logger.info("User created", extra={"user_id": user.id, "creator_id": initiator.id})
        return user

    async def update_me(self, data: MeUpdate, initiator: User) -> User:
        return await self._apply_update(initiator, data.model_dump(exclude_unset=True), initiator)

    async def update_user(self, user_id: str, data: UserUpdate, initiator: User) -> User:
        user = self.provider.get_user(user_id)
        self.verifier.verify_authorization(initiator, Permission.UPDATE_USER, user)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("permissions") is not None:
            # Changing permissions needs the permission itself; owning the record is not enough
            self.verifier.verify_authorization(initiator, Permission.UPDATE_USER)
            changes["permissions"] = [getattr(p, "value", p) for p in changes["permissions"]]
        return await self._apply_update(user, changes, initiator)

    async def _apply_update(self, user: User, changes: dict, initiator: User) -> User:
        changes = {key: value for key, value in changes.items() if value is not None}
        if "email" in changes and changes["email"] != user.email:
            self._verify_email_not_taken(changes["email"], ignore_id=user.id)
        if "password" in changes:
            user.password_hash = hash_password(changes.pop("password"))
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        self._commit(user.email)
        logger.info("User updated", extra={"user_id": user.id, "initiator_id": initiator.id})
        return user

    async def delete_me(self, initiator: User) -> User:
        return await self._delete(initiator, initiator)

    async def delete_user(self, user_id: str, initiator: User) -> User:
        user = self.provider.get_user(user_id)
        self.verifier.verify_authorization(initiator, Permission.DELETE_USER, user)
        return await self._delete(user, initiator)

    async def _delete(self, user: User, initiator: User) -> User:
        user.soft_delete()
        self.db.commit()
        logger.info("User deleted", extra={"user_id": user.id, "initiator_id": initiator.id})
        return user

    async def list_users(
        self,
        query: UserListQuery,
        params: CursorPaginationParams,
        initiator: User,
    ) -> Page[User]:
        self.verifier.verify_authorization(initiator, Permission.GET_USERS)
        stmt = select(User).where(User.deleted_at.is_(None))
        if query.search:
            pattern = f"%{query.search}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        return paginate(self.db, stmt, User.id, params)


class UserCategoryExamsSyncer:
    """Rebuilds a user's category id -> active exam id map."""

    def __init__(self, db: Session):
        self.db = db

    def sync_category_exams(self, user_id: str) -> User | None:
        user = self.db.get(User, user_id)
        if user is None:
            return None

        exams = self.db.execute(
            select(Exam.category_id, Exam.id)
            .where(Exam.owner_id == user_id, Exam.completed_at.is_(None), Exam.deleted_at.is_(None))
            .order_by(Exam.id)
        ).all()
        user.category_exams = {category_id: exam_id for category_id, exam_id in exams}
        user.updated_at = utcnow()
        self.db.commit()
        return user
