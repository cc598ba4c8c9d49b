"""
Pydantic schemas for organization-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field


class OrganizationEnsure(BaseModel):
    """Schema for ensure-by-name; a missing name falls back to the configured default."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)


class OrganizationResponse(BaseModel):
    """Schema for organization responses."""
    id: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
