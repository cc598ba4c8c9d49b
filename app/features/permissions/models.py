"""
Permission catalogue and role grants.

Only direct grants are stored. What a role inherits from its ancestors is
computed at read time by app.features.permissions.inheritance, so it always
reflects the current delegation flags up the chain.
"""
import enum

from sqlalchemy import String, ForeignKey, Text, Boolean, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class PermissionCategory(str, enum.Enum):
    """Broad family a permission belongs to."""
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ADMIN = "admin"
    SPECIAL = "special"


class Permission(Base, TimestampMixin):
    """
    Permission defined within an organization.

    Examples:
    - name="View Users", category=read, resource="users"
    - name="System Administration", category=admin, resource="system"
    """
    __tablename__ = "permissions"

    # Primary key using ULID
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Permission definition
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[PermissionCategory] = mapped_column(
        SQLEnum(PermissionCategory),
        nullable=False,
        index=True
    )
    resource: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name!r}, category={self.category}, resource={self.resource})>"


class RolePermission(Base, TimestampMixin):
    """
    Direct grant of a permission to a role.

    ``can_delegate`` lets the grant flow down to child roles.
    """
    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    role_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    permission_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    granted: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    can_delegate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    permission: Mapped["Permission"] = relationship("Permission", lazy="selectin")

    def __repr__(self) -> str:
        return (
            f"<RolePermission(role_id={self.role_id}, permission_id={self.permission_id}, "
            f"granted={self.granted}, can_delegate={self.can_delegate})>"
        )
