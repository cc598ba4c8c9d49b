"""
Data-sharing rule model.

A flat collection: each rule describes data flowing from a source unit to a
target unit. No hierarchy is involved.
"""
import enum
from typing import List

from sqlalchemy import String, ForeignKey, Text, Boolean, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class AccessLevel(str, enum.Enum):
    """How much the target unit may do with the shared data."""
    READ = "read"
    WRITE = "write"
    FULL = "full"


class DataSharingRule(Base, TimestampMixin):
    """
    Sharing policy between two units of one organization.

    Examples:
    - Finance -> Executive, data_types=["budget-data"], access_level=read
    - R&D -> Product, data_types=["research-data"], access_level=full
    """
    __tablename__ = "data_sharing_rules"

    # Primary key using ULID
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    source_unit_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organization_units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_unit_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organization_units.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Tags stored as JSON arrays, e.g. ["financial-reports", "budget-data"]
    data_types: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    conditions: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    access_level: Mapped[AccessLevel] = mapped_column(
        SQLEnum(AccessLevel),
        nullable=False,
        default=AccessLevel.READ,
        index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    source_unit: Mapped["OrganizationUnit"] = relationship(  # type: ignore
        "OrganizationUnit", foreign_keys=[source_unit_id], lazy="selectin"
    )
    target_unit: Mapped["OrganizationUnit"] = relationship(  # type: ignore
        "OrganizationUnit", foreign_keys=[target_unit_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return (
            f"<DataSharingRule(id={self.id}, source={self.source_unit_id}, "
            f"target={self.target_unit_id}, access={self.access_level})>"
        )
