"""Cursor pagination over time-ordered ids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from fastapi import Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Select
from sqlalchemy.orm import Session

from quizhub.common.object_id import normalize_object_id

T = TypeVar("T")

DEFAULT_CURSOR_LIMIT = 10
MAX_CURSOR_LIMIT = 100

SortOrder = Literal["asc", "desc"]


class CursorPaginationParams(BaseModel):
    """Cursor-based pagination.

    Cursors are entity ids; ``next_cursor`` moves forward in ``order``,
    ``prev_cursor`` moves back. If both are sent, ``prev_cursor`` wins.
    """

    size: int = Field(default=DEFAULT_CURSOR_LIMIT, ge=1, le=MAX_CURSOR_LIMIT)
    order: SortOrder = "desc"
    prev_cursor: str | None = Field(default=None, description="Cursor for previous page")
    next_cursor: str | None = Field(default=None, description="Cursor for next page")

    @field_validator("prev_cursor", "next_cursor")
    @classmethod
    def validate_cursor(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return normalize_object_id(value, field="cursor")


@dataclass
class Page(Generic[T]):
    """One page of entities plus the cursors around it."""

    items: list[T]
    size: int
    order: SortOrder
    next_cursor: str | None = None
    prev_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


class CursorPaginatedResponse(BaseModel, Generic[T]):
    """Cursor-based pagination response.

    Format: {items, next_cursor, prev_cursor, has_more, size, order}
    """

    items: list[T]
    next_cursor: str | None = Field(default=None, description="Cursor for next page, null if no more")
    prev_cursor: str | None = Field(default=None, description="Cursor for previous page, null if first")
    has_more: bool = Field(description="True if more items available")
    size: int
    order: SortOrder

    @classmethod
    def from_page(cls, page: Page, items: list[Any]) -> "CursorPaginatedResponse":
        return cls(
            items=items,
            next_cursor=page.next_cursor,
            prev_cursor=page.prev_cursor,
            has_more=page.has_more,
            size=page.size,
            order=page.order,
        )


def paginate(db: Session, stmt: Select, id_column: Any, params: CursorPaginationParams) -> Page:
    """Run ``stmt`` as one cursor page ordered by ``id_column``."""
    backwards = params.prev_cursor is not None
    cursor = params.prev_cursor if backwards else params.next_cursor
    ascending = (params.order == "asc") != backwards

    if cursor is not None:
        stmt = stmt.where(id_column > cursor if ascending else id_column < cursor)
    stmt = stmt.order_by(id_column.asc() if ascending else id_column.desc()).limit(params.size + 1)

    rows = list(db.execute(stmt).scalars().all())
    more = len(rows) > params.size
    rows = rows[: params.size]
    if backwards:
        rows.reverse()

    has_next = True if backwards else more
    has_prev = more if backwards else cursor is not None

    return Page(
        items=rows,
        size=params.size,
        order=params.order,
        next_cursor=rows[-1].id if rows and has_next else None,
        prev_cursor=rows[0].id if rows and has_prev else None,
    )


def cursor_pagination_params(
    size: int = Query(DEFAULT_CURSOR_LIMIT, ge=1, le=MAX_CURSOR_LIMIT, description="Items per page"),
    order: SortOrder = Query("desc", description="Sort order by creation"),
    prev_cursor: str | None = Query(None, description="Cursor for previous page"),
    next_cursor: str | None = Query(None, description="Cursor for next page"),
) -> CursorPaginationParams:
    """Dependency for cursor-based pagination."""
    return CursorPaginationParams(size=size, order=order, prev_cursor=prev_cursor, next_cursor=next_cursor)
