"""
Pydantic schemas for organization unit requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, computed_field

from app.core.tree.statistics import TreeStatistics
from app.features.assignments.schemas import (
    UnitSummary,
    UnitRoleResponse,
    UnitUserAssignmentResponse,
    UserAssignmentRef,
)


class UnitBase(BaseModel):
    """Base unit schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=1000)


class UnitCreate(UnitBase):
    """
    Schema for creating a unit.

    assigned_roles and assigned_users are written in the same transaction as
    the unit itself. Repeated role ids collapse to one link; for a repeated
    user id the last entry wins.
    """
    parent_id: str | None = Field(None, description="Parent unit ID, null for a root unit")
    assigned_roles: list[str] = Field(default_factory=list)
    assigned_users: list[UserAssignmentRef] = Field(default_factory=list)


class UnitUpdate(BaseModel):
    """
    Schema for updating a unit.

    A list that is present replaces the unit's current links wholesale; an
    omitted list leaves them as they are.
    """
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    assigned_roles: list[str] | None = None
    assigned_users: list[UserAssignmentRef] | None = None


class UnitMove(BaseModel):
    """Schema for reparenting a unit; null moves it to the top level."""
    parent_id: str | None = None


class UnitResponse(UnitBase):
    """Unit with its role links and user placements."""
    id: str
    organization_id: str
    parent_id: str | None = None
    level: int
    sort_order: int
    created_at: datetime
    updated_at: datetime
    unit_roles: list[UnitRoleResponse] = Field(default_factory=list)
    user_assignments: list[UnitUserAssignmentResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def assigned_roles(self) -> list[str]:
        return [link.role_id for link in self.unit_roles]

    @computed_field
    @property
    def assigned_users(self) -> list[UserAssignmentRef]:
        return [
            UserAssignmentRef(user_id=placement.user_id, role_id=placement.role_id)
            for placement in self.user_assignments
        ]


class UnitNode(UnitResponse):
    """Unit with its sub-units attached."""
    children: list["UnitNode"] = Field(default_factory=list)


class UnitDetail(UnitResponse):
    """Single unit with its parent and direct children."""
    parent: UnitSummary | None = None
    children: list[UnitSummary] = Field(default_factory=list)


class UnitStatistics(TreeStatistics):
    """Tree statistics for the unit chart."""
    pass


class DeleteResult(BaseModel):
    """Ids removed by a cascading delete, children first."""
    deleted: int
    ids: list[str]


UnitNode.model_rebuild()
