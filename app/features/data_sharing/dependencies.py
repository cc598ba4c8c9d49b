"""
Data-sharing dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.data_sharing.models import DataSharingRule
from app.features.data_sharing.service import get_rule


async def get_rule_by_id(
    rule_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> DataSharingRule:
    """Get data-sharing rule by ID or raise NotFoundError."""
    return await get_rule(db, rule_id)
