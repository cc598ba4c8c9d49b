"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.features.assignments.schemas import AssignmentResponse


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    department: str = Field("", max_length=255)
    avatar: str | None = Field(None, max_length=500)


class UserCreate(UserBase):
    """Schema for creating a new user."""
    organization_id: str | None = Field(None, description="Home organization")


class UserResponse(UserBase):
    """Schema for user responses."""
    id: str
    organization_id: str | None = None
    created_at: datetime
    updated_at: datetime

    # Unit placements, each with its unit and role
    unit_assignments: list[AssignmentResponse] = []

    model_config = {"from_attributes": True}
