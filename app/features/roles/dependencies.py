"""
Role-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.roles.models import Role
from app.features.roles.service import get_role


async def get_role_by_id(
    role_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Role:
    """Get role by ID or raise NotFoundError."""
    return await get_role(db, role_id)
