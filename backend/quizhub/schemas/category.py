"""Pydantic schemas for categories."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from quizhub.schemas.common import RatingOut


class CategoryCreate(BaseModel):
    """Request to create (or fully replace) a category."""

    name: str = Field(..., min_length=3, max_length=100)
    required_score: int = Field(default=0, ge=0, le=100)


class CategoryUpdate(BaseModel):
    """Partial category update; only sent fields change."""

    name: str | None = Field(default=None, min_length=3, max_length=100)
    required_score: int | None = Field(default=None, ge=0, le=100)


class CategoryListQuery(BaseModel):
    """Filters for the category list."""

    search: str | None = None
    approved: bool | None = None
    creator: Literal["i", "somebody"] | None = None


class CategoryOut(BaseModel):
    """Category response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    required_score: int
    question_count: int
    approved_question_count: int
    is_approved: bool
    rating: RatingOut | None = None
    creator_id: str | None
    owner_id: str | None
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_model(cls, category) -> "CategoryOut":
        out = cls.model_validate(category)
        out.rating = RatingOut(
            mark_count=category.rating_mark_count,
            average_mark=category.rating_average_mark,
        )
        return out
