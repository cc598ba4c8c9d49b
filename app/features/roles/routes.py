"""
Role hierarchy routes.

``organization_router`` is mounted under /organizations/{organization_id}/roles,
``router`` under /roles.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.organizations.dependencies import get_organization_by_id
from app.features.organizations.models import Organization
from app.features.permissions.dependencies import get_permission_by_id
from app.features.permissions.models import Permission
from app.features.permissions.schemas import (
    GrantPermission,
    PermissionMatrixResponse,
    RolePermissionResponse,
    RolePermissionsView,
)
from app.features.permissions import service as permission_service
from app.features.roles.dependencies import get_role_by_id
from app.features.roles.models import Role
from app.features.roles.schemas import (
    RoleCreate,
    RoleDetail,
    RoleMove,
    RoleNode,
    RoleResponse,
    RoleStatistics,
    RoleUpdate,
)
from app.features.roles import service
from app.features.units.schemas import DeleteResult


organization_router = APIRouter(tags=["roles"])
router = APIRouter(tags=["roles"])


# ============================================================================
# Organization-scoped
# ============================================================================

@organization_router.get("/", response_model=list[RoleNode])
async def get_role_tree(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Role hierarchy of the organization, as root roles with nested children."""
    return await service.get_role_tree(db, organization.id)


@organization_router.get("/flat", response_model=list[RoleResponse])
async def list_roles(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """All roles of the organization without nesting."""
    return await service.list_roles(db, organization.id)


@organization_router.get("/statistics", response_model=RoleStatistics)
async def get_role_statistics(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    expanded: list[str] = Query(default=[], description="Ids of the roles currently expanded in the tree view")
):
    """Tree statistics of the role hierarchy plus the number of peer-sharing roles."""
    return await service.get_role_statistics(db, organization.id, expanded)


@organization_router.get("/permission-matrix", response_model=PermissionMatrixResponse)
async def get_permission_matrix(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Effective permissions of every role in the organization."""
    return await permission_service.get_permission_matrix(db, organization.id)


@organization_router.post("/", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a role, optionally under a parent role."""
    return await service.create_role(db, organization.id, data)


# ============================================================================
# Single role
# ============================================================================

@router.get("/{role_id}", response_model=RoleDetail)
async def get_role(role: Annotated[Role, Depends(get_role_by_id)]):
    """Get a role with its direct grants."""
    return role


@router.put("/{role_id}", response_model=RoleDetail)
async def update_role(
    data: RoleUpdate,
    role: Annotated[Role, Depends(get_role_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update role name, description or peer sharing."""
    return await service.update_role(db, role, data)


@router.post("/{role_id}/move", response_model=RoleResponse)
async def move_role(
    data: RoleMove,
    role: Annotated[Role, Depends(get_role_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Reparent a role. Moving it under itself or a descendant is rejected (409)."""
    return await service.move_role(db, role, data.parent_id)


@router.delete("/{role_id}", response_model=DeleteResult)
async def delete_role(
    role_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a role together with all of its sub-roles."""
    deleted = await service.delete_role(db, role_id)
    return DeleteResult(deleted=len(deleted), ids=deleted)


# ============================================================================
# Grants
# ============================================================================

@router.get("/{role_id}/permissions", response_model=RolePermissionsView)
async def get_role_permissions(
    role: Annotated[Role, Depends(get_role_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Direct, inherited and effective permissions of the role."""
    return await permission_service.get_role_permissions(db, role)


@router.put("/{role_id}/permissions/{permission_id}", response_model=RolePermissionResponse)
async def grant_permission(
    data: GrantPermission,
    role: Annotated[Role, Depends(get_role_by_id)],
    permission: Annotated[Permission, Depends(get_permission_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Grant a permission directly to the role (upsert)."""
    return await permission_service.grant_permission(db, role, permission.id, data.can_delegate)


@router.delete("/{role_id}/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_permission(
    role_id: str,
    permission_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a direct grant."""
    await permission_service.revoke_permission(db, role_id, permission_id)


@router.post("/{role_id}/permissions/{permission_id}/toggle-delegation", response_model=RolePermissionResponse)
async def toggle_delegation(
    role_id: str,
    permission_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Flip whether child roles inherit this grant."""
    return await permission_service.toggle_delegation(db, role_id, permission_id)
