"""
Organization feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.organizations.models import Organization
from app.features.organizations.schemas import OrganizationEnsure, OrganizationResponse
from app.features.organizations.dependencies import get_organization_by_id
from app.features.organizations.service import ensure_organization, list_organizations


router = APIRouter(tags=["organizations"])


@router.post("/ensure", response_model=OrganizationResponse)
async def ensure_organization_exists(
    data: OrganizationEnsure,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Return the organization with this name, creating it on first use (201)."""
    organization, created = await ensure_organization(db, data.name, data.description)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return organization


@router.get("/", response_model=list[OrganizationResponse])
async def list_all_organizations(db: Annotated[AsyncSession, Depends(get_db)]):
    """List organizations by name."""
    return await list_organizations(db)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization: Annotated[Organization, Depends(get_organization_by_id)]
):
    """Get organization details."""
    return organization
