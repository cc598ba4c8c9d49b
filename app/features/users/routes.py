"""
User feature routes, including a user's unit placements.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.assignments.schemas import AssignmentResponse, AssignUserToUnit
from app.features.assignments import service as assignment_service
from app.features.users.dependencies import get_user_by_id
from app.features.users.models import User
from app.features.users.schemas import UserCreate, UserResponse
from app.features.users import service


router = APIRouter(tags=["users"])


@router.get("/", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    organization_id: str | None = Query(None, description="Only users of this organization")
):
    """List users, newest first."""
    return await service.list_users(db, organization_id)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a user. Emails are unique (409 on duplicates)."""
    return await service.create_user(db, data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user: Annotated[User, Depends(get_user_by_id)]):
    """Get a user with their unit placements."""
    return user


@router.get("/{user_id}/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List the user's unit placements."""
    return await assignment_service.list_user_assignments(db, user_id)


@router.post("/{user_id}/assignments", response_model=AssignmentResponse)
async def assign_to_unit(
    user_id: str,
    data: AssignUserToUnit,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Place the user in a unit with a role; an existing placement in that unit is updated."""
    return await assignment_service.assign_user_to_unit(db, user_id, data.unit_id, data.role_id, data.notes)


@router.delete("/{user_id}/assignments", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_unit(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    unit_id: str = Query(..., description="Unit to remove the user from")
):
    """Remove the user's placement in a unit."""
    await assignment_service.remove_user_from_unit(db, user_id, unit_id)
