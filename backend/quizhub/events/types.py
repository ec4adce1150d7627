"""Domain event names."""

from enum import Enum as PyEnum


class Event(str, PyEnum):
    """Events dispatched after a state change is committed."""

    CATEGORY_CREATED = "categoryCreated"
    CATEGORY_UPDATED = "categoryUpdated"
    CATEGORY_APPROVE_TOGGLED = "categoryApproveToggled"
    CATEGORY_RATED = "categoryRated"
    CATEGORY_DELETED = "categoryDeleted"

    QUESTION_CREATED = "questionCreated"
    QUESTION_UPDATED = "questionUpdated"
    QUESTION_APPROVE_TOGGLED = "questionApproveToggled"
    QUESTION_RATED = "questionRated"
    QUESTION_DELETED = "questionDeleted"

    EXAM_CREATED = "examCreated"
    EXAM_COMPLETED = "examCompleted"
    EXAM_DELETED = "examDeleted"


class ActivityEvent(str, PyEnum):
    """Event names recorded in the activity log."""

    CATEGORY_CREATED = "categoryCreated"
    CATEGORY_APPROVED = "categoryApproved"
    CATEGORY_UNAPPROVED = "categoryUnapproved"
    CATEGORY_RATED = "categoryRated"
    CATEGORY_DELETED = "categoryDeleted"
