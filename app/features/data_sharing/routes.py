"""
Data-sharing rule routes.

``organization_router`` is mounted under
/organizations/{organization_id}/data-sharing, ``router`` under /data-sharing.
"""
from typing import Annotated, Literal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.data_sharing.dependencies import get_rule_by_id
from app.features.data_sharing.models import AccessLevel, DataSharingRule
from app.features.data_sharing.schemas import (
    DataSharingRuleCreate,
    DataSharingRuleResponse,
    DataSharingRuleUpdate,
    DataSharingStatistics,
)
from app.features.data_sharing import service
from app.features.organizations.dependencies import get_organization_by_id
from app.features.organizations.models import Organization


organization_router = APIRouter(tags=["data-sharing"])
router = APIRouter(tags=["data-sharing"])


@organization_router.get("/", response_model=list[DataSharingRuleResponse])
async def list_rules(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = Query(None, description="Match against name or description"),
    access_level: AccessLevel | None = Query(None),
    status_filter: Literal["all", "active", "inactive"] = Query("all", alias="status")
):
    """List sharing rules, newest first."""
    active = None if status_filter == "all" else status_filter == "active"
    return await service.list_rules(db, organization.id, search, access_level, active)


@organization_router.get("/statistics", response_model=DataSharingStatistics)
async def get_statistics(
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Rule, data-type and unit counters."""
    return await service.get_statistics(db, organization.id)


@organization_router.post("/", response_model=DataSharingRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    data: DataSharingRuleCreate,
    organization: Annotated[Organization, Depends(get_organization_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a sharing rule between two units of the organization."""
    return await service.create_rule(db, organization.id, data)


@router.get("/{rule_id}", response_model=DataSharingRuleResponse)
async def get_rule(rule: Annotated[DataSharingRule, Depends(get_rule_by_id)]):
    """Get a sharing rule."""
    return rule


@router.patch("/{rule_id}", response_model=DataSharingRuleResponse)
async def update_rule(
    data: DataSharingRuleUpdate,
    rule: Annotated[DataSharingRule, Depends(get_rule_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a sharing rule."""
    return await service.update_rule(db, rule, data)


@router.post("/{rule_id}/toggle", response_model=DataSharingRuleResponse)
async def toggle_rule(
    rule: Annotated[DataSharingRule, Depends(get_rule_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Switch a rule between active and inactive."""
    return await service.toggle_rule(db, rule)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(
    rule_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a sharing rule."""
    await service.delete_rule(db, rule_id)
