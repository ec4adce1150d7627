"""Question provider and workflow service."""

import html

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.common.object_id import normalize_object_id
from quizhub.common.pagination import CursorPaginationParams, Page, paginate
from quizhub.core.app_exceptions import QuestionNotFoundError, QuestionTitleTakenError, ValidatorError
from quizhub.core.logging import get_logger
from quizhub.core.permissions import Permission
from quizhub.events.dispatcher import EventDispatcher
from quizhub.events.types import Event
from quizhub.models.base import ApprovalStatus, utcnow
from quizhub.models.question import Question
from quizhub.models.user import User
from quizhub.schemas.question import QuestionCreate, QuestionListQuery, QuestionUpdate, check_type_payload
from quizhub.services.authorization import AuthorizationVerifier
from quizhub.services.category import CategoryProvider

logger = get_logger(__name__)


def escape_title(title: str) -> str:
    """Titles are stored with HTML special characters escaped."""
    return html.escape(title.strip(), quote=True)


class QuestionProvider:
    """Fetch-by-id over non-deleted questions."""

    def __init__(self, db: Session):
        self.db = db

    def get_question(self, question_id: str, include_deleted: bool = False) -> Question:
        """
        Get a question by id; ``include_deleted`` also returns soft-deleted ones,
        which exam snapshots still refer to.

        Raises:
            ValidatorError: If the id is malformed
            QuestionNotFoundError: If absent, or soft-deleted without ``include_deleted``
        """
        question_id = normalize_object_id(question_id)
        stmt = select(Question).where(Question.id == question_id)
        if not include_deleted:
            stmt = stmt.where(Question.deleted_at.is_(None))
        question = self.db.execute(stmt).scalar_one_or_none()
        if question is None:
            raise QuestionNotFoundError(question_id)
        return question


class QuestionService:
    """Question use cases."""

    def __init__(
        self,
        db: Session,
        verifier: AuthorizationVerifier,
        dispatcher: EventDispatcher,
        provider: QuestionProvider | None = None,
        category_provider: CategoryProvider | None = None,
    ):
        self.db = db
        self.verifier = verifier
        self.dispatcher = dispatcher
        self.provider = provider or QuestionProvider(db)
        self.category_provider = category_provider or CategoryProvider(db)

    def can_view_choices(self, question: Question, viewer: User | None) -> bool:
        return self.verifier.is_authorized(viewer, Permission.GET_QUESTION_CHOICES, question)

    def _verify_title_not_taken(self, title: str, ignore_id: str | None = None) -> None:
        stmt = select(Question.id).where(Question.title == title, Question.deleted_at.is_(None))
        if ignore_id is not None:
            stmt = stmt.where(Question.id != ignore_id)
        if self.db.execute(stmt).first() is not None:
            raise QuestionTitleTakenError(title)

    def _commit(self, title: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise QuestionTitleTakenError(title) from None

    async def create_question(self, data: QuestionCreate, initiator: User) -> Question:
        """Create a pending question in an existing category."""
        self.verifier.verify_authorization(initiator, Permission.CREATE_QUESTION)
        category = self.category_provider.get_category(data.category_id)

        title = escape_title(data.title)
        self._verify_title_not_taken(title)

        question = Question(
            category_id=category.id,
            type=data.type,
            difficulty=data.difficulty,
            title=title,
            choices=[choice.model_dump() for choice in data.choices] if data.choices else None,
            answers=[answer.model_dump() for answer in data.answers] if data.answers else None,
            creator_id=initiator.id,
            owner_id=initiator.id,
            approval_status=ApprovalStatus.PENDING,
        )
        self.db.add(question)
        self._commit(title)
        logger.info("Question created", extra={"question_id": question.id, "category_id": category.id})

        await self.dispatcher.dispatch(self.db, Event.QUESTION_CREATED, {"question": question, "user": initiator})
        return question

    async def replace_question(self, question_id: str, data: QuestionCreate, initiator: User) -> Question:
        return await self._apply_update(question_id, data.model_dump(), initiator)

    async def update_question(self, question_id: str, data: QuestionUpdate, initiator: User) -> Question:
        changes = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}
        return await self._apply_update(question_id, changes, initiator)

    async def _apply_update(self, question_id: str, changes: dict, initiator: User) -> Question:
        question = self.provider.get_question(question_id)
        self.verifier.verify_authorization(initiator, Permission.UPDATE_QUESTION, question)

        # Changes are checked against the merged question, not only the sent fields
        question_type = changes.get("type", question.type)
        try:
            check_type_payload(
                question_type,
                changes["choices"] if "choices" in changes else question.choices,
                changes["answers"] if "answers" in changes else question.answers,
            )
        except ValueError as e:
            raise ValidatorError(str(e), details=[{"field": "type", "value": question_type.value}]) from None

        previous_category_id = question.category_id
        if "category_id" in changes:
            changes["category_id"] = self.category_provider.get_category(changes["category_id"]).id
        if "title" in changes:
            changes["title"] = escape_title(changes["title"])
            if changes["title"] != question.title:
                self._verify_title_not_taken(changes["title"], ignore_id=question.id)
        for key, value in changes.items():
            setattr(question, key, value)
        question.updated_at = utcnow()
        self._commit(question.title)

        await self.dispatcher.dispatch(
            self.db,
            Event.QUESTION_UPDATED,
            {"question": question, "user": initiator, "previous_category_id": previous_category_id},
        )
        return question

    async def toggle_question_approve(self, question_id: str, initiator: User) -> Question:
        question = self.provider.get_question(question_id)
        self.verifier.verify_authorization(initiator, Permission.APPROVE_QUESTION)

        approved = question.toggle_approval()
        question.updated_at = utcnow()
        self.db.commit()
        logger.info("Question approval toggled", extra={"question_id": question.id, "approved": approved})

        await self.dispatcher.dispatch(
            self.db, Event.QUESTION_APPROVE_TOGGLED, {"question": question, "user": initiator}
        )
        return question

    async def delete_question(self, question_id: str, initiator: User) -> Question:
        question = self.provider.get_question(question_id)
        self.verifier.verify_authorization(initiator, Permission.DELETE_QUESTION, question)

        question.soft_delete()
        self.db.commit()
        logger.info("Question deleted", extra={"question_id": question.id, "user_id": initiator.id})

        await self.dispatcher.dispatch(self.db, Event.QUESTION_DELETED, {"question": question, "user": initiator})
        return question

    async def list_questions(self, query: QuestionListQuery, params: CursorPaginationParams) -> Page[Question]:
        stmt = select(Question).where(Question.deleted_at.is_(None))
        if query.category_id:
            stmt = stmt.where(Question.category_id == query.category_id)
        if query.type is not None:
            stmt = stmt.where(Question.type == query.type)
        if query.difficulty is not None:
            stmt = stmt.where(Question.difficulty == query.difficulty)
        if query.search:
            stmt = stmt.where(Question.title.ilike(f"%{escape_title(query.search)}%"))
        return paginate(self.db, stmt, Question.id, params)
