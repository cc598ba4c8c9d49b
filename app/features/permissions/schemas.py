"""
Pydantic schemas for permission management.

Request and response models for the permission catalogue, role grants and
the computed direct / inherited / effective views.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from app.features.permissions.models import PermissionCategory


# ============================================================================
# Permission Schemas
# ============================================================================

class PermissionBase(BaseModel):
    """Base permission schema."""
    name: str = Field(..., min_length=1, max_length=100, description="Permission name")
    description: str = Field("", max_length=1000, description="Permission description")
    category: PermissionCategory = Field(..., description="read, write, delete, admin or special")
    resource: str = Field(..., min_length=1, max_length=100, description="Resource name (e.g., 'users', 'reports')")


class PermissionCreate(PermissionBase):
    """Schema for creating a new permission."""
    pass


class PermissionUpdate(BaseModel):
    """Schema for updating a permission."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[PermissionCategory] = None
    resource: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None


class PermissionResponse(PermissionBase):
    """Schema for permission response."""
    id: str
    organization_id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Grant Schemas
# ============================================================================

class GrantPermission(BaseModel):
    """Schema for granting a permission to a role."""
    can_delegate: bool = Field(False, description="Let child roles inherit this grant")


class RolePermissionResponse(BaseModel):
    """Stored direct grant."""
    id: str
    role_id: str
    permission_id: str
    granted: bool
    can_delegate: bool
    permission: PermissionResponse
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EffectivePermissionResponse(BaseModel):
    """Direct or inherited entry of a role's computed permission set."""
    role_id: str
    permission_id: str
    granted: bool
    can_delegate: bool
    inherited_from: Optional[str] = Field(None, description="Role holding the originating grant, null for direct grants")
    permission: Optional[PermissionResponse] = None


class RolePermissionsView(BaseModel):
    """Permissions visible to one role."""
    role_id: str
    direct: List[EffectivePermissionResponse] = []
    inherited: List[EffectivePermissionResponse] = []
    effective: List[EffectivePermissionResponse] = []


class PermissionMatrixRow(BaseModel):
    """One role of the permission matrix."""
    role_id: str
    role_name: str
    level: int
    effective: List[EffectivePermissionResponse] = []
    delegates: List[str] = Field(default_factory=list, description="Permission ids this role passes on to its child roles")


class PermissionMatrixResponse(BaseModel):
    """Effective permissions of every role of an organization."""
    roles: List[PermissionMatrixRow] = []
    total_permissions: int = 0
    direct_grants: int = 0
    inherited_grants: int = 0
    delegable_grants: int = 0
