"""
Organization unit routes.

``organization_router`` is mounted under /organizations/{organization_id}/units
for the tree views and creation; ``router`` under /units for single units.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.assignments.schemas import AssignRoleToUnit
from app.features.assignments.service import assign_role_to_unit, remove_role_from_unit
from app.features.organizations.dependencies import get_organization_by_id
from app.features.organizations.models import Organization
from app.features.units.dependencies import get_unit_by_id
from app.features.units.models import OrganizationUnit
from app.features.units.schemas import (
    DeleteResult,
    UnitCreate,
    UnitDetail,
    UnitMove,
    UnitNode,
    UnitResponse,
    UnitStatistics,
    UnitUpdate,
)
from app.features.units import service


organization_router = APIRouter(tags=["units"])
router = APIRouter(tags=["units"])


# ============================================================================
# Organization-scoped
# ============================================================================

@organization_router.get("/", response_model=list[UnitNode])
async def get_unit_tree(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Unit hierarchy of the organization, as a list of root units with nested children."""
    return await service.get_unit_tree(db, organization.id)


@organization_router.get("/flat", response_model=list[UnitResponse])
async def list_units(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """All units of the organization without nesting."""
    return await service.list_units(db, organization.id)


@organization_router.get("/statistics", response_model=UnitStatistics)
async def get_unit_statistics(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    expanded: list[str] = Query(default=[], description="Ids of the units currently expanded in the tree view")
):
    """Node count, depth, leaves, branching and expansion ratio of the unit tree."""
    return await service.get_unit_statistics(db, organization.id, expanded)


@organization_router.post("/", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
async def create_unit(
    data: UnitCreate,
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a unit, optionally under a parent and with roles and users assigned."""
    return await service.create_unit(db, organization.id, data)


# ============================================================================
# Single unit
# ============================================================================

@router.get("/{unit_id}", response_model=UnitDetail)
async def get_unit(
    unit: Annotated[OrganizationUnit, Depends(get_unit_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get a unit with its parent, direct children, roles and users."""
    return await service.get_unit_detail(db, unit.id)


@router.put("/{unit_id}", response_model=UnitResponse)
async def update_unit(
    data: UnitUpdate,
    unit: Annotated[OrganizationUnit, Depends(get_unit_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a unit; assigned_roles / assigned_users, when sent, replace the current links."""
    return await service.update_unit(db, unit, data)


@router.post("/{unit_id}/move", response_model=UnitResponse)
async def move_unit(
    data: UnitMove,
    unit: Annotated[OrganizationUnit, Depends(get_unit_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Reparent a unit. Moving it under itself or a descendant is rejected (409)."""
    return await service.move_unit(db, unit, data.parent_id)


@router.delete("/{unit_id}", response_model=DeleteResult)
async def delete_unit(
    unit_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a unit together with all of its descendants."""
    deleted = await service.delete_unit(db, unit_id)
    return DeleteResult(deleted=len(deleted), ids=deleted)


@router.post("/{unit_id}/roles", response_model=UnitResponse)
async def add_role_to_unit(
    data: AssignRoleToUnit,
    unit: Annotated[OrganizationUnit, Depends(get_unit_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Make a role available in the unit. Adding a role twice is a no-op."""
    await assign_role_to_unit(db, unit.id, data.role_id)
    return await service.get_unit(db, unit.id)


@router.delete("/{unit_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role_from_unit(
    role_id: str,
    unit: Annotated[OrganizationUnit, Depends(get_unit_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a role from the unit."""
    await remove_role_from_unit(db, unit.id, role_id)
