"""Event subscribers keeping activities and denormalized counters in sync."""

from typing import Any

from sqlalchemy.orm import Session

from quizhub.events.dispatcher import EventDispatcher
from quizhub.events.types import ActivityEvent, Event
from quizhub.services.activity import ActivityService
from quizhub.services.category import CategoryQuestionCountSyncer
from quizhub.services.rating import RatingSyncer, UserRatingMarksSyncer
from quizhub.services.user import UserCategoryExamsSyncer


def _initiator_id(payload: dict[str, Any]) -> str | None:
    user = payload.get("user")
    return user.id if user is not None else None


# Activities


async def record_category_created(db: Session, payload: dict[str, Any]) -> None:
    await ActivityService(db).create_category_activity(
        payload["category"], ActivityEvent.CATEGORY_CREATED, creator_id=_initiator_id(payload)
    )


async def record_category_approve_toggled(db: Session, payload: dict[str, Any]) -> None:
    category = payload["category"]
    event = ActivityEvent.CATEGORY_APPROVED if category.is_approved else ActivityEvent.CATEGORY_UNAPPROVED
    await ActivityService(db).create_category_activity(category, event, creator_id=_initiator_id(payload))


async def record_category_rated(db: Session, payload: dict[str, Any]) -> None:
    await ActivityService(db).create_category_activity(
        payload["category"], ActivityEvent.CATEGORY_RATED, creator_id=_initiator_id(payload)
    )


async def record_category_deleted(db: Session, payload: dict[str, Any]) -> None:
    await ActivityService(db).create_category_activity(
        payload["category"], ActivityEvent.CATEGORY_DELETED, creator_id=_initiator_id(payload)
    )


# Ratings


async def sync_category_rating(db: Session, payload: dict[str, Any]) -> None:
    RatingSyncer(db).sync_rating(payload["category"])


async def sync_user_category_rating_marks(db: Session, payload: dict[str, Any]) -> None:
    UserRatingMarksSyncer(db).sync_category_rating_marks(payload["user"])


async def sync_question_rating(db: Session, payload: dict[str, Any]) -> None:
    RatingSyncer(db).sync_rating(payload["question"])


async def sync_user_question_rating_marks(db: Session, payload: dict[str, Any]) -> None:
    UserRatingMarksSyncer(db).sync_question_rating_marks(payload["user"])


# Question counters


async def sync_category_question_counts(db: Session, payload: dict[str, Any]) -> None:
    syncer = CategoryQuestionCountSyncer(db)
    question = payload["question"]
    syncer.sync_question_counts(question.category_id)
    previous = payload.get("previous_category_id")
    if previous and previous != question.category_id:
        syncer.sync_question_counts(previous)


# Exams


async def sync_user_category_exams(db: Session, payload: dict[str, Any]) -> None:
    exam = payload["exam"]
    UserCategoryExamsSyncer(db).sync_category_exams(exam.owner_id or exam.creator_id)


def register_subscribers(dispatcher: EventDispatcher) -> EventDispatcher:
    """Wire every subscriber; order within an event is the order below."""
    dispatcher.subscribe(Event.CATEGORY_CREATED, record_category_created)
    dispatcher.subscribe(Event.CATEGORY_APPROVE_TOGGLED, record_category_approve_toggled)
    dispatcher.subscribe(Event.CATEGORY_RATED, record_category_rated)
    dispatcher.subscribe(Event.CATEGORY_RATED, sync_user_category_rating_marks)
    dispatcher.subscribe(Event.CATEGORY_RATED, sync_category_rating)
    dispatcher.subscribe(Event.CATEGORY_DELETED, record_category_deleted)

    for event in (
        Event.QUESTION_CREATED,
        Event.QUESTION_UPDATED,
        Event.QUESTION_APPROVE_TOGGLED,
        Event.QUESTION_DELETED,
    ):
        dispatcher.subscribe(event, sync_category_question_counts)
    dispatcher.subscribe(Event.QUESTION_RATED, sync_user_question_rating_marks)
    dispatcher.subscribe(Event.QUESTION_RATED, sync_question_rating)

    for event in (Event.EXAM_CREATED, Event.EXAM_COMPLETED, Event.EXAM_DELETED):
        dispatcher.subscribe(event, sync_user_category_exams)
    return dispatcher
