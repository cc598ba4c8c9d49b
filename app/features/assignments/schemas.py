"""
Pydantic schemas for unit/role/user assignments.

Also holds the summary shapes of the linked parties (unit, user), which both
the unit views and the user views embed.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from app.features.roles.schemas import RoleSummary


class UnitSummary(BaseModel):
    """Minimal unit reference."""
    id: str
    name: str
    level: int
    parent_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Minimal user reference."""
    id: str
    email: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class UserAssignmentRef(BaseModel):
    """A (user, role) pair placed into a unit."""
    user_id: str
    role_id: str


class AssignUserToUnit(BaseModel):
    """Schema for placing a user into a unit (upsert on user + unit)."""
    unit_id: str = Field(..., description="Unit ID")
    role_id: str = Field(..., description="Role the user holds in that unit")
    notes: str | None = Field(None, max_length=1000)


class AssignRoleToUnit(BaseModel):
    """Schema for offering a role inside a unit."""
    role_id: str = Field(..., description="Role ID")


class UnitRoleResponse(BaseModel):
    """Role offered inside a unit."""
    id: str
    unit_id: str
    role_id: str
    role: RoleSummary
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UnitUserAssignmentResponse(BaseModel):
    """User placement as seen from the unit."""
    id: str
    user_id: str
    unit_id: str
    role_id: str
    notes: str | None = None
    user: UserSummary
    role: RoleSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AssignmentResponse(BaseModel):
    """User placement joined with its unit and role."""
    id: str
    user_id: str
    unit_id: str
    role_id: str
    notes: str | None = None
    unit: UnitSummary
    role: RoleSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
