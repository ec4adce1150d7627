"""Pydantic schemas for the permission model."""

from pydantic import BaseModel


class PermissionHierarchyOut(BaseModel):
    """Role -> granted permissions."""

    hierarchy: dict[str, list[str]]


class PermissionsOut(BaseModel):
    permissions: list[str]
    hierarchy: dict[str, list[str]]
