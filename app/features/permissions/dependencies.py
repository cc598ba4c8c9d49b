"""
Permission-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.models import Permission
from app.features.permissions.service import get_permission


async def get_permission_by_id(
    permission_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Permission:
    """Get permission by ID or raise NotFoundError."""
    return await get_permission(db, permission_id)
