"""
Pydantic schemas for data-sharing rules.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator

from app.features.assignments.schemas import UnitSummary
from app.features.data_sharing.models import AccessLevel


def _clean_tags(values: list[str]) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping order."""
    return list(dict.fromkeys(value.strip() for value in values if value.strip()))


class DataSharingRuleBase(BaseModel):
    """Base data-sharing rule schema."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=1000)
    source_unit_id: str
    target_unit_id: str
    data_types: list[str] = Field(default_factory=list, description="e.g. ['financial-reports', 'budget-data']")
    conditions: list[str] = Field(default_factory=list, description="Free-text conditions")
    access_level: AccessLevel = AccessLevel.READ
    is_active: bool = True

    @field_validator("data_types", "conditions")
    @classmethod
    def clean_tags(cls, values: list[str]) -> list[str]:
        return _clean_tags(values)


class DataSharingRuleCreate(DataSharingRuleBase):
    """Schema for creating a data-sharing rule."""
    pass


class DataSharingRuleUpdate(BaseModel):
    """Schema for updating a data-sharing rule."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    source_unit_id: str | None = None
    target_unit_id: str | None = None
    data_types: list[str] | None = None
    conditions: list[str] | None = None
    access_level: AccessLevel | None = None
    is_active: bool | None = None

    @field_validator("data_types", "conditions")
    @classmethod
    def clean_tags(cls, values: list[str] | None) -> list[str] | None:
        return None if values is None else _clean_tags(values)


class DataSharingRuleResponse(DataSharingRuleBase):
    """Schema for data-sharing rule responses."""
    id: str
    organization_id: str
    source_unit: UnitSummary
    target_unit: UnitSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DataSharingStatistics(BaseModel):
    """Counters shown above the rule list."""
    total_rules: int
    active_rules: int
    total_data_types: int = Field(..., description="Distinct data types across all rules")
    units_involved: int = Field(..., description="Distinct units appearing as source or target")
