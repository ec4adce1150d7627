"""Category endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response, status

from quizhub.common.pagination import CursorPaginatedResponse, CursorPaginationParams, cursor_pagination_params
from quizhub.core.dependencies import CurrentUser, ServicesDep, get_optional_user
from quizhub.models.user import User
from quizhub.schemas.category import CategoryCreate, CategoryListQuery, CategoryOut, CategoryUpdate

router = APIRouter()


@router.get("", response_model=CursorPaginatedResponse[CategoryOut])
async def list_categories(
    services: ServicesDep,
    params: Annotated[CursorPaginationParams, Depends(cursor_pagination_params)],
    user: Annotated[User | None, Depends(get_optional_user)],
    search: str | None = Query(None, description="Case-insensitive name search"),
    approved: bool | None = Query(None),
    creator: Literal["i", "somebody"] | None = Query(None),
):
    """List non-deleted categories."""
    query = CategoryListQuery(search=search, approved=approved, creator=creator)
    page = await services.categories.list_categories(query, params, user)
    return CursorPaginatedResponse.from_page(page, [CategoryOut.from_model(c) for c in page.items])


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(current_user: CurrentUser, data: CategoryCreate, services: ServicesDep):
    """Create a category; it stays pending until approved."""
    category = await services.categories.create_category(data, current_user)
    return CategoryOut.from_model(category)


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: str, services: ServicesDep):
    return CategoryOut.from_model(services.category_provider.get_category(category_id))


@router.put("/{category_id}", status_code=status.HTTP_205_RESET_CONTENT)
async def replace_category(
    current_user: CurrentUser,
    category_id: str,
    data: CategoryCreate,
    services: ServicesDep,
) -> Response:
    await services.categories.replace_category(category_id, data, current_user)
    return Response(status_code=status.HTTP_205_RESET_CONTENT)


@router.patch("/{category_id}", status_code=status.HTTP_205_RESET_CONTENT)
async def update_category(
    current_user: CurrentUser,
    category_id: str,
    data: CategoryUpdate,
    services: ServicesDep,
) -> Response:
    await services.categories.update_category(category_id, data, current_user)
    return Response(status_code=status.HTTP_205_RESET_CONTENT)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(current_user: CurrentUser, category_id: str, services: ServicesDep) -> Response:
    await services.categories.delete_category(category_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
