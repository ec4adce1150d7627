"""GraphQL input types and their conversion into request schemas."""

import dataclasses
from enum import Enum
from typing import Optional, TypeVar

import strawberry
from pydantic import BaseModel

from quizhub.common.pagination import CursorPaginationParams
from quizhub.graphql.types import QuestionDifficultyEnum, QuestionTypeEnum

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _plain(value):
    if dataclasses.is_dataclass(value):
        return {
            field.name: _plain(getattr(value, field.name))
            for field in dataclasses.fields(value)
            if getattr(value, field.name) not in (strawberry.UNSET, None)
        }
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value


def to_schema(schema_cls: type[SchemaT], data) -> SchemaT:
    """Build a pydantic request schema from a strawberry input, skipping unset and null fields.

    Validation errors surface as pydantic ``ValidationError`` (BadRequestError).
    """
    return schema_cls(**(_plain(data) if data is not None else {}))


@strawberry.input
class PaginationInput:
    size: Optional[int] = strawberry.UNSET
    order: Optional[str] = strawberry.UNSET
    prev_cursor: Optional[strawberry.ID] = strawberry.UNSET
    next_cursor: Optional[strawberry.ID] = strawberry.UNSET


def pagination_params(pagination: Optional[PaginationInput]) -> CursorPaginationParams:
    return to_schema(CursorPaginationParams, pagination)


@strawberry.input
class CategoryCreateInput:
    name: str
    required_score: Optional[int] = strawberry.UNSET


@strawberry.input
class CategoryUpdateInput:
    name: Optional[str] = strawberry.UNSET
    required_score: Optional[int] = strawberry.UNSET


@strawberry.input
class CategoryFilterInput:
    search: Optional[str] = strawberry.UNSET
    approved: Optional[bool] = strawberry.UNSET
    creator: Optional[str] = strawberry.UNSET


@strawberry.input
class QuestionChoiceInput:
    title: str
    correct: Optional[bool] = strawberry.UNSET
    explanation: Optional[str] = strawberry.UNSET


@strawberry.input
class QuestionAnswerInput:
    variants: list[str]
    correct: Optional[bool] = strawberry.UNSET
    explanation: Optional[str] = strawberry.UNSET


@strawberry.input
class QuestionCreateInput:
    category_id: strawberry.ID
    type: QuestionTypeEnum
    difficulty: QuestionDifficultyEnum
    title: str
    choices: Optional[list[QuestionChoiceInput]] = strawberry.UNSET
    answers: Optional[list[QuestionAnswerInput]] = strawberry.UNSET


@strawberry.input
class QuestionUpdateInput:
    category_id: Optional[strawberry.ID] = strawberry.UNSET
    type: Optional[QuestionTypeEnum] = strawberry.UNSET
    difficulty: Optional[QuestionDifficultyEnum] = strawberry.UNSET
    title: Optional[str] = strawberry.UNSET
    choices: Optional[list[QuestionChoiceInput]] = strawberry.UNSET
    answers: Optional[list[QuestionAnswerInput]] = strawberry.UNSET


@strawberry.input
class QuestionFilterInput:
    category_id: Optional[strawberry.ID] = strawberry.UNSET
    type: Optional[QuestionTypeEnum] = strawberry.UNSET
    difficulty: Optional[QuestionDifficultyEnum] = strawberry.UNSET
    search: Optional[str] = strawberry.UNSET


@strawberry.input
class ExamCreateInput:
    category_id: strawberry.ID


@strawberry.input
class ExamQuestionAnswerInput:
    choice: Optional[int] = strawberry.UNSET
    answer: Optional[str] = strawberry.UNSET


@strawberry.input
class ExamFilterInput:
    category_id: Optional[strawberry.ID] = strawberry.UNSET
    completion: Optional[bool] = strawberry.UNSET


@strawberry.input
class CredentialsInput:
    email: str
    password: str


@strawberry.input
class MeCreateInput:
    name: str
    email: str
    password: str


@strawberry.input
class MeUpdateInput:
    name: Optional[str] = strawberry.UNSET
    email: Optional[str] = strawberry.UNSET
    password: Optional[str] = strawberry.UNSET


@strawberry.input
class UserCreateInput:
    name: str
    email: str
    password: str
    permissions: Optional[list[str]] = strawberry.UNSET


@strawberry.input
class UserUpdateInput:
    name: Optional[str] = strawberry.UNSET
    email: Optional[str] = strawberry.UNSET
    password: Optional[str] = strawberry.UNSET
    permissions: Optional[list[str]] = strawberry.UNSET


@strawberry.input
class UserFilterInput:
    search: Optional[str] = strawberry.UNSET
