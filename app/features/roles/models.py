"""
Role model.

Roles form a hierarchy of their own, separate from organization units.
A role's permissions are its direct grants plus whatever its ancestors
delegate down the chain (see app.features.permissions.inheritance).
"""
from sqlalchemy import String, ForeignKey, Text, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class Role(Base, TimestampMixin):
    """
    Node of the role hierarchy.

    The persisted form keeps only ``parent_id``; children are attached when
    the tree is built for a request.
    """
    __tablename__ = "roles"

    # Primary key using ULID
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Role definition
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Hierarchy
    parent_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("roles.id"),
        nullable=True,
        index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    share_data_with_peers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    role_permissions: Mapped[list["RolePermission"]] = relationship(  # type: ignore
        "RolePermission",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r}, level={self.level})>"
