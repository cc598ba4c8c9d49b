"""
Organization-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.core.errors import NotFoundError
from app.features.organizations.models import Organization


async def get_organization_by_id(
    organization_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Organization:
    """
    Get organization by ID or raise 404.

    Args:
        organization_id: Organization ULID
        db: Database session

    Returns:
        Organization model

    Raises:
        NotFoundError: if organization not found
    """
    organization = await db.get(Organization, organization_id)
    if organization is None:
        raise NotFoundError("Organization not found")
    return organization
