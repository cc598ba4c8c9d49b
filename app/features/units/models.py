"""
Organization unit models.

Units form the org chart. A unit can be offered a set of roles
(UnitRoleAssignment) and holds user placements, each user with exactly one
role inside a given unit (UserUnitAssignment).
"""
from sqlalchemy import String, ForeignKey, Text, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class OrganizationUnit(Base, TimestampMixin):
    """
    Node of the organizational hierarchy (division, department, team...).

    Only ``parent_id`` is stored; children are attached when the tree is
    built. ``level`` is the depth from the root and is kept consistent by
    create and move.
    """
    __tablename__ = "organization_units"

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

    # Hierarchy
    parent_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("organization_units.id"),
        nullable=True,
        index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    unit_roles: Mapped[list["UnitRoleAssignment"]] = relationship(
        "UnitRoleAssignment",
        lazy="selectin",
        passive_deletes=True,
        order_by="UnitRoleAssignment.created_at",
    )

    user_assignments: Mapped[list["UserUnitAssignment"]] = relationship(
        "UserUnitAssignment",
        back_populates="unit",
        lazy="selectin",
        passive_deletes=True,
        order_by="UserUnitAssignment.created_at",
    )

    def __repr__(self) -> str:
        return f"<OrganizationUnit(id={self.id}, name={self.name!r}, level={self.level})>"


class UnitRoleAssignment(Base, TimestampMixin):
    """A role made available inside a unit."""
    __tablename__ = "unit_role_assignments"
    __table_args__ = (UniqueConstraint("unit_id", "role_id", name="uq_unit_role"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    unit_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organization_units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    role: Mapped["Role"] = relationship("Role", lazy="selectin")  # type: ignore

    def __repr__(self) -> str:
        return f"<UnitRoleAssignment(unit_id={self.unit_id}, role_id={self.role_id})>"


class UserUnitAssignment(Base, TimestampMixin):
    """
    Placement of a user in a unit with a role.

    Unique on (user_id, unit_id): assigning the same user to the same unit
    again replaces the role and notes instead of adding a row.
    """
    __tablename__ = "user_unit_assignments"
    __table_args__ = (UniqueConstraint("user_id", "unit_id", name="uq_user_unit"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organization_units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="unit_assignments", lazy="selectin")  # type: ignore
    unit: Mapped["OrganizationUnit"] = relationship(
        "OrganizationUnit", back_populates="user_assignments", lazy="selectin"
    )
    role: Mapped["Role"] = relationship("Role", lazy="selectin")  # type: ignore

    def __repr__(self) -> str:
        return f"<UserUnitAssignment(user_id={self.user_id}, unit_id={self.unit_id}, role_id={self.role_id})>"
