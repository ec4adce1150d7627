"""Schemas shared across entities."""

from pydantic import BaseModel, Field

from quizhub.common.object_id import normalize_object_id


class RatingOut(BaseModel):
    """Aggregate rating of a category or question."""

    mark_count: int = 0
    average_mark: float | None = None


class RateRequest(BaseModel):
    """A 1-5 mark for a category or question."""

    mark: int = Field(..., ge=1, le=5)


def object_id_field(value: str | None, field: str) -> str | None:
    """Validate an optional id coming from a request body."""
    if value is None:
        return None
    return normalize_object_id(value, field=field)
