"""GraphQL object types built from ORM models."""

from datetime import datetime
from typing import Optional

import strawberry
from strawberry.types import Info

from quizhub.core.permissions import Permission
from quizhub.models import Activity, Category, Exam, Question, User
from quizhub.models.question import QuestionDifficulty, QuestionType
from quizhub.services.exam import ExamQuestionView
from quizhub.services.rating import rating_mark_of

QuestionTypeEnum = strawberry.enum(QuestionType, name="QuestionType")
QuestionDifficultyEnum = strawberry.enum(QuestionDifficulty, name="QuestionDifficulty")


def _viewer(info: Info):
    return info.context.user


@strawberry.type
class Rating:
    mark_count: int
    average_mark: Optional[float]


@strawberry.type(name="Category")
class CategoryNode:
    id: strawberry.ID
    name: str
    required_score: int
    question_count: int
    approved_question_count: int
    is_approved: bool
    rating: Rating
    creator_id: Optional[strawberry.ID]
    owner_id: Optional[strawberry.ID]
    created_at: datetime
    updated_at: Optional[datetime]

    @strawberry.field(description="The viewer's mark for this category, if rated")
    def my_rating_mark(self, info: Info) -> Optional[int]:
        viewer = _viewer(info)
        if viewer is None:
            return None
        return rating_mark_of(viewer.category_rating_marks, self.id)

    @classmethod
    def from_model(cls, category: Category) -> "CategoryNode":
        return cls(
            id=category.id,
            name=category.name,
            required_score=category.required_score,
            question_count=category.question_count,
            approved_question_count=category.approved_question_count,
            is_approved=category.is_approved,
            rating=Rating(mark_count=category.rating_mark_count, average_mark=category.rating_average_mark),
            creator_id=category.creator_id,
            owner_id=category.owner_id,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


@strawberry.type
class QuestionChoice:
    title: str
    correct: Optional[bool] = None
    explanation: Optional[str] = None


@strawberry.type
class QuestionAnswer:
    variants: list[str]
    correct: Optional[bool] = None
    explanation: Optional[str] = None


@strawberry.type(name="Question")
class QuestionNode:
    id: strawberry.ID
    category_id: strawberry.ID
    type: QuestionTypeEnum
    difficulty: QuestionDifficultyEnum
    title: str
    is_approved: bool
    rating: Rating
    creator_id: Optional[strawberry.ID]
    owner_id: Optional[strawberry.ID]
    created_at: datetime
    updated_at: Optional[datetime]
    model: strawberry.Private[Question]

    def _can_view_choices(self, info: Info) -> bool:
        return info.context.services.verifier.is_authorized(
            _viewer(info), Permission.GET_QUESTION_CHOICES, self.model
        )

    @strawberry.field(description="Visible to holders of getQuestionChoices and the owner")
    def choices(self, info: Info) -> Optional[list[QuestionChoice]]:
        if not self.model.choices or not self._can_view_choices(info):
            return None
        return [QuestionChoice(**choice) for choice in self.model.choices]

    @strawberry.field(description="Visible to holders of getQuestionChoices and the owner")
    def answers(self, info: Info) -> Optional[list[QuestionAnswer]]:
        if not self.model.answers or not self._can_view_choices(info):
            return None
        return [QuestionAnswer(**answer) for answer in self.model.answers]

    @strawberry.field(description="The viewer's mark for this question, if rated")
    def my_rating_mark(self, info: Info) -> Optional[int]:
        viewer = _viewer(info)
        if viewer is None:
            return None
        return rating_mark_of(viewer.question_rating_marks, self.id)

    @classmethod
    def from_model(cls, question: Question) -> "QuestionNode":
        return cls(
            id=question.id,
            category_id=question.category_id,
            type=question.type,
            difficulty=question.difficulty,
            title=question.title,
            is_approved=question.is_approved,
            rating=Rating(mark_count=question.rating_mark_count, average_mark=question.rating_average_mark),
            creator_id=question.creator_id,
            owner_id=question.owner_id,
            created_at=question.created_at,
            updated_at=question.updated_at,
            model=question,
        )


@strawberry.type(name="Exam")
class ExamNode:
    id: strawberry.ID
    category_id: strawberry.ID
    question_number: int
    question_count: int
    answered_question_count: int
    correct_answer_count: Optional[int]
    completed_at: Optional[datetime]
    creator_id: Optional[strawberry.ID]
    owner_id: Optional[strawberry.ID]
    created_at: datetime
    updated_at: Optional[datetime]

    @classmethod
    def from_model(cls, exam: Exam) -> "ExamNode":
        return cls(
            id=exam.id,
            category_id=exam.category_id,
            question_number=exam.question_number,
            question_count=exam.question_count,
            answered_question_count=exam.answered_question_count,
            correct_answer_count=exam.correct_answer_count if exam.is_completed else None,
            completed_at=exam.completed_at,
            creator_id=exam.creator_id,
            owner_id=exam.owner_id,
            created_at=exam.created_at,
            updated_at=exam.updated_at,
        )


@strawberry.type(name="ExamQuestion")
class ExamQuestionNode:
    exam: ExamNode
    number: int
    question: QuestionNode
    choices: Optional[list[str]]
    choice: Optional[int]
    answer: Optional[str]

    @classmethod
    def from_view(cls, view: ExamQuestionView) -> "ExamQuestionNode":
        return cls(
            exam=ExamNode.from_model(view.exam),
            number=view.number,
            question=QuestionNode.from_model(view.question),
            choices=view.choices,
            choice=view.choice,
            answer=view.answer,
        )


@strawberry.type(name="User")
class UserNode:
    id: strawberry.ID
    name: str
    created_at: datetime
    updated_at: Optional[datetime]
    model: strawberry.Private[User]

    def _allowed(self, info: Info, permission: Permission) -> bool:
        return info.context.services.verifier.is_authorized(_viewer(info), permission, self.model)

    @strawberry.field(description="Visible to holders of getUserEmail and the user")
    def email(self, info: Info) -> Optional[str]:
        return self.model.email if self._allowed(info, Permission.GET_USER_EMAIL) else None

    @strawberry.field(description="Visible to holders of getUserPermissions and the user")
    def permissions(self, info: Info) -> Optional[list[str]]:
        return list(self.model.permissions) if self._allowed(info, Permission.GET_USER_PERMISSIONS) else None

    @strawberry.field(description="Category ids per mark; index i holds mark i + 1")
    def category_rating_marks(self, info: Info) -> Optional[list[list[strawberry.ID]]]:
        if not self._allowed(info, Permission.GET_USER_CATEGORY_RATING_MARKS):
            return None
        return self.model.category_rating_marks

    @strawberry.field(description="Question ids per mark; index i holds mark i + 1")
    def question_rating_marks(self, info: Info) -> Optional[list[list[strawberry.ID]]]:
        if not self._allowed(info, Permission.GET_USER_QUESTION_RATING_MARKS):
            return None
        return self.model.question_rating_marks

    @classmethod
    def from_model(cls, user: User) -> "UserNode":
        return cls(
            id=user.id,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
            model=user,
        )


@strawberry.type(name="Activity")
class ActivityNode:
    id: strawberry.ID
    event: str
    category_id: Optional[strawberry.ID]
    category_name: Optional[str]
    creator_id: Optional[strawberry.ID]
    created_at: datetime

    @classmethod
    def from_model(cls, activity: Activity) -> "ActivityNode":
        return cls(
            id=activity.id,
            event=activity.event,
            category_id=activity.category_id,
            category_name=activity.category_name,
            creator_id=activity.creator_id,
            created_at=activity.created_at,
        )


@strawberry.type
class PermissionGrant:
    permission: str
    grants: list[str]


@strawberry.type(name="Permission")
class PermissionNode:
    permissions: list[str]
    hierarchy: list[PermissionGrant]


@strawberry.type
class AuthenticationToken:
    token: str


@strawberry.type
class PaginationMeta:
    size: int
    order: str
    next_cursor: Optional[strawberry.ID]
    prev_cursor: Optional[strawberry.ID]
    has_more: bool

    @classmethod
    def from_page(cls, page) -> "PaginationMeta":
        return cls(
            size=page.size,
            order=page.order,
            next_cursor=page.next_cursor,
            prev_cursor=page.prev_cursor,
            has_more=page.has_more,
        )


@strawberry.type
class PaginatedCategories:
    data: list[CategoryNode]
    meta: PaginationMeta


@strawberry.type
class PaginatedQuestions:
    data: list[QuestionNode]
    meta: PaginationMeta


@strawberry.type
class PaginatedExams:
    data: list[ExamNode]
    meta: PaginationMeta


@strawberry.type
class PaginatedUsers:
    data: list[UserNode]
    meta: PaginationMeta


@strawberry.type
class PaginatedActivities:
    data: list[ActivityNode]
    meta: PaginationMeta
