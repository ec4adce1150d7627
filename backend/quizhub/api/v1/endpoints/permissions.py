"""Permission model endpoints."""

from fastapi import APIRouter, Request

from quizhub.core.permissions import DEFAULT_PERMISSION_HIERARCHY, all_permissions
from quizhub.schemas.permission import PermissionHierarchyOut, PermissionsOut

router = APIRouter()


def _hierarchy(request: Request) -> dict[str, list[str]]:
    return getattr(request.app.state, "permission_hierarchy", None) or DEFAULT_PERMISSION_HIERARCHY


@router.get("", response_model=PermissionsOut)
async def get_permissions(request: Request) -> PermissionsOut:
    return PermissionsOut(permissions=all_permissions(), hierarchy=_hierarchy(request))


@router.get("/hierarchy", response_model=PermissionHierarchyOut)
async def get_permission_hierarchy(request: Request) -> PermissionHierarchyOut:
    return PermissionHierarchyOut(hierarchy=_hierarchy(request))
