"""
User model with ULID primary keys.
"""
from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class User(Base, TimestampMixin):
    """
    User that can be placed into organization units.

    Uses ULID instead of auto-incrementing integers for better distributed systems support.
    """
    __tablename__ = "users"

    # Primary key using ULID (Universally Unique Lexicographically Sortable Identifier)
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # User information
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Optional fields
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    department: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    organization_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Relationships
    unit_assignments: Mapped[list["UserUnitAssignment"]] = relationship(  # type: ignore
        "UserUnitAssignment",
        back_populates="user",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
