"""
Permission catalogue routes.

``organization_router`` is mounted under
/organizations/{organization_id}/permissions, ``router`` under /permissions.
Grants live on the role routes (/roles/{role_id}/permissions).
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.organizations.dependencies import get_organization_by_id
from app.features.organizations.models import Organization
from app.features.permissions.dependencies import get_permission_by_id
from app.features.permissions.models import Permission
from app.features.permissions.schemas import PermissionCreate, PermissionResponse, PermissionUpdate
from app.features.permissions import service


organization_router = APIRouter(tags=["permissions"])
router = APIRouter(tags=["permissions"])


@organization_router.get("/", response_model=list[PermissionResponse])
async def list_permissions(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    include_inactive: bool = Query(True, description="Also list deactivated permissions")
):
    """List the organization's permissions by category and name."""
    return await service.list_permissions(db, organization.id, include_inactive)


@organization_router.post("/", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Add a permission to the organization's catalogue."""
    return await service.create_permission(db, organization.id, data)


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(permission: Annotated[Permission, Depends(get_permission_by_id)]):
    """Get permission details."""
    return permission


@router.patch("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    data: PermissionUpdate,
    permission: Annotated[Permission, Depends(get_permission_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a permission (including activating or deactivating it)."""
    return await service.update_permission(db, permission, data)


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a permission and every grant of it."""
    await service.delete_permission(db, permission_id)
