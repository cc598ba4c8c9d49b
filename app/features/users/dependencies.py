"""
User-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.models import User
from app.features.users.service import get_user


async def get_user_by_id(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Get user by ID or raise NotFoundError.

    Usage:
        @router.get("/{user_id}")
        async def read_user(user: Annotated[User, Depends(get_user_by_id)]):
            return user
    """
    return await get_user(db, user_id)
