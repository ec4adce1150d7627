"""Pydantic schemas for exams."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quizhub.schemas.common import object_id_field
from quizhub.schemas.question import QuestionOut


class ExamCreate(BaseModel):
    """Request to start an exam for a category."""

    category_id: str

    @field_validator("category_id")
    @classmethod
    def validate_category_id(cls, v: str) -> str:
        return object_id_field(v, "category_id")


class ExamQuestionAnswerCreate(BaseModel):
    """Answer for one exam question: a choice index or a typed answer."""

    choice: int | None = Field(default=None, ge=0)
    answer: str | None = Field(default=None, min_length=2, max_length=10)


class ExamListQuery(BaseModel):
    """Filters for the exam list."""

    category_id: str | None = None
    completion: bool | None = None

    @field_validator("category_id")
    @classmethod
    def validate_category_id(cls, v: str | None) -> str | None:
        return object_id_field(v, "category_id")


class ExamOut(BaseModel):
    """Exam response; correct_answer_count is only set once completed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    category_id: str
    question_number: int
    question_count: int
    answered_question_count: int
    correct_answer_count: int | None = None
    completed_at: datetime | None
    creator_id: str | None
    owner_id: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, exam) -> "ExamOut":
        out = cls.model_validate(exam)
        if not exam.is_completed:
            out.correct_answer_count = None
        return out


class ExamQuestionOut(BaseModel):
    """One exam question with the recorded answer."""

    exam_id: str
    number: int
    question: QuestionOut
    choices: list[str] | None = None
    choice: int | None = None
    answer: str | None = None
