"""Rating subsystem: one mark per user per target, aggregates and user buckets."""

from typing import Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizhub.core.app_exceptions import CategoryRatedAlreadyError, QuestionRatedAlreadyError
from quizhub.core.logging import get_logger
from quizhub.core.permissions import Permission
from quizhub.events.dispatcher import EventDispatcher
from quizhub.events.types import Event
from quizhub.models.base import utcnow
from quizhub.models.category import Category
from quizhub.models.question import Question
from quizhub.models.rating import RatingMark
from quizhub.models.user import User, empty_rating_marks
from quizhub.services.authorization import AuthorizationVerifier

logger = get_logger(__name__)

RatingTarget = Union[Category, Question]


def _target_column(target: RatingTarget):
    return RatingMark.category_id if isinstance(target, Category) else RatingMark.question_id


def rating_mark_of(buckets: list[list[str]] | None, target_id: str) -> int | None:
    """Mark (1-5) the bucket structure holds for ``target_id``, if any."""
    for index, ids in enumerate(buckets or []):
        if target_id in ids:
            return index + 1
    return None


class RatingMarkCreator:
    """Creates rating marks for categories and questions."""

    def __init__(self, db: Session, verifier: AuthorizationVerifier, dispatcher: EventDispatcher):
        self.db = db
        self.verifier = verifier
        self.dispatcher = dispatcher

    def _find_rating_mark(self, target: RatingTarget, initiator: User) -> str | None:
        column = _target_column(target)
        return self.db.execute(
            select(RatingMark.id).where(RatingMark.creator_id == initiator.id, column == target.id)
        ).scalars().first()

    async def create_rating_mark(self, target: RatingTarget, mark: int, initiator: User) -> RatingTarget:
        """
        Rate a category or question.

        The unique index on (creator, target) is the authoritative duplicate
        check; the query before the insert only avoids a needless write.

        Raises:
            AuthorizationFailedError: Without the rate permission and not the owner
            CategoryRatedAlreadyError / QuestionRatedAlreadyError: On a second mark
        """
        is_category = isinstance(target, Category)
        permission = Permission.RATE_CATEGORY if is_category else Permission.RATE_QUESTION
        rated_already = CategoryRatedAlreadyError if is_category else QuestionRatedAlreadyError
        self.verifier.verify_authorization(initiator, permission, target)

        if self._find_rating_mark(target, initiator) is not None:
            raise rated_already(target.id)

        rating_mark = RatingMark(creator_id=initiator.id, mark=mark)
        if is_category:
            rating_mark.category_id = target.id
        else:
            rating_mark.question_id = target.id
        self.db.add(rating_mark)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise rated_already(target.id) from None

        logger.info(
            "Rating mark created",
            extra={"target_id": target.id, "user_id": initiator.id, "mark": mark},
        )
        event = Event.CATEGORY_RATED if is_category else Event.QUESTION_RATED
        key = "category" if is_category else "question"
        await self.dispatcher.dispatch(
            self.db, event, {key: target, "user": initiator, "rating_mark": rating_mark}
        )
        return target


class RatingSyncer:
    """Recomputes {mark_count, average_mark} of a target from its marks."""

    def __init__(self, db: Session):
        self.db = db

    def sync_rating(self, target: RatingTarget) -> RatingTarget:
        column = _target_column(target)
        count, total = self.db.execute(
            select(func.count(RatingMark.id), func.coalesce(func.sum(RatingMark.mark), 0)).where(
                column == target.id, RatingMark.deleted_at.is_(None)
            )
        ).one()
        target.rating_mark_count = count
        target.rating_average_mark = (total / count) if count else None
        target.updated_at = utcnow()
        self.db.commit()
        return target


class UserRatingMarksSyncer:
    """Rebuilds a user's five rating buckets from their marks."""

    def __init__(self, db: Session):
        self.db = db

    def _buckets(self, user: User, column) -> list[list[str]]:
        buckets = empty_rating_marks()
        rows = self.db.execute(
            select(column, RatingMark.mark)
            .where(RatingMark.creator_id == user.id, column.is_not(None), RatingMark.deleted_at.is_(None))
            .order_by(RatingMark.id)
        ).all()
        for target_id, mark in rows:
            buckets[mark - 1].append(target_id)
        return buckets

    def sync_category_rating_marks(self, user: User) -> User:
        user.category_rating_marks = self._buckets(user, RatingMark.category_id)
        self.db.commit()
        return user

    def sync_question_rating_marks(self, user: User) -> User:
        user.question_rating_marks = self._buckets(user, RatingMark.question_id)
        self.db.commit()
        return user
