"""Pydantic schemas for questions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from quizhub.models.question import QuestionDifficulty, QuestionType
from quizhub.schemas.common import RatingOut, object_id_field


class QuestionChoice(BaseModel):
    """One option of a choice question."""

    title: str = Field(..., min_length=1, max_length=300)
    correct: bool = False
    explanation: str | None = Field(default=None, max_length=3000)


class QuestionAnswer(BaseModel):
    """Accepted spellings for a typed answer."""

    variants: list[str] = Field(..., min_length=1)
    correct: bool = True
    explanation: str | None = Field(default=None, min_length=10, max_length=3000)

    @field_validator("variants")
    @classmethod
    def check_variants(cls, v: list[str]) -> list[str]:
        for variant in v:
            if not 2 <= len(variant) <= 10:
                raise ValueError("each variant must be 2-10 characters")
        return v


def check_type_payload(question_type: QuestionType | None, choices: list | None, answers: list | None) -> None:
    if question_type == QuestionType.CHOICE and not choices:
        raise ValueError("choices must not be empty for a choice question")
    if question_type == QuestionType.TYPE and not answers:
        raise ValueError("answers must not be empty for a type question")


class QuestionCreate(BaseModel):
    """Request to create (or fully replace) a question."""

    category_id: str
    type: QuestionType
    difficulty: QuestionDifficulty
    title: str = Field(..., min_length=10, max_length=3000)
    choices: list[QuestionChoice] | None = None
    answers: list[QuestionAnswer] | None = None

    @field_validator("category_id")
    @classmethod
    def validate_category_id(cls, v: str) -> str:
        return object_id_field(v, "category_id")

    @model_validator(mode="after")
    def check_payload(self) -> "QuestionCreate":
        check_type_payload(self.type, self.choices, self.answers)
        return self


class QuestionUpdate(BaseModel):
    """Partial question update."""

    category_id: str | None = None
    type: QuestionType | None = None
    difficulty: QuestionDifficulty | None = None
    title: str | None = Field(default=None, min_length=10, max_length=3000)
    choices: list[QuestionChoice] | None = Field(default=None, min_length=1)
    answers: list[QuestionAnswer] | None = Field(default=None, min_length=1)

    @field_validator("category_id")
    @classmethod
    def validate_category_id(cls, v: str | None) -> str | None:
        return object_id_field(v, "category_id")

    @model_validator(mode="after")
    def check_payload(self) -> "QuestionUpdate":
        if self.type is not None and (self.choices is not None or self.answers is not None):
            check_type_payload(self.type, self.choices, self.answers)
        return self


class QuestionListQuery(BaseModel):
    """Filters for the question list."""

    category_id: str | None = None
    type: QuestionType | None = None
    difficulty: QuestionDifficulty | None = None
    search: str | None = None

    @field_validator("category_id")
    @classmethod
    def validate_category_id(cls, v: str | None) -> str | None:
        return object_id_field(v, "category_id")


class QuestionOut(BaseModel):
    """Question response; choices only for holders of getQuestionChoices or owners."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    category_id: str
    type: QuestionType
    difficulty: QuestionDifficulty
    title: str
    is_approved: bool
    choices: list[QuestionChoice] | None = None
    rating: RatingOut | None = None
    creator_id: str | None
    owner_id: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, question, show_choices: bool = False) -> "QuestionOut":
        out = cls.model_validate(question)
        if not show_choices:
            out.choices = None
        out.rating = RatingOut(
            mark_count=question.rating_mark_count,
            average_mark=question.rating_average_mark,
        )
        return out
