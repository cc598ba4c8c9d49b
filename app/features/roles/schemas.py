"""
Pydantic schemas for role-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from app.core.tree.statistics import TreeStatistics
from app.features.permissions.schemas import RolePermissionResponse


class RoleBase(BaseModel):
    """Base role schema."""
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=1000)
    share_data_with_peers: bool = Field(False, description="Roles at the same level may see each other's data")


class RoleCreate(RoleBase):
    """Schema for creating a role; omit parent_id for a root role."""
    parent_id: str | None = Field(None, description="Parent role ID")


class RoleUpdate(BaseModel):
    """Schema for updating role information."""
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    share_data_with_peers: bool | None = None


class RoleMove(BaseModel):
    """Schema for reparenting a role; null moves it to the top level."""
    parent_id: str | None = None


class RoleSummary(BaseModel):
    """Minimal role reference embedded in other responses."""
    id: str
    name: str
    level: int
    parent_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleResponse(RoleBase):
    """Schema for role responses."""
    id: str
    organization_id: str
    parent_id: str | None = None
    level: int
    sort_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleNode(RoleResponse):
    """Role with its sub-roles attached."""
    children: list["RoleNode"] = Field(default_factory=list)


class RoleDetail(RoleResponse):
    """Role with its stored direct grants."""
    role_permissions: list[RolePermissionResponse] = Field(default_factory=list)


class RoleStatistics(TreeStatistics):
    """Tree statistics plus the count of roles sharing data with peers."""
    shared_roles: int = 0


RoleNode.model_rebuild()
