"""
Unit-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.units.models import OrganizationUnit
from app.features.units.service import get_unit


async def get_unit_by_id(
    unit_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> OrganizationUnit:
    """Get unit by ID or raise NotFoundError."""
    return await get_unit(db, unit_id)
