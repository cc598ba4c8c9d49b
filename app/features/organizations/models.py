"""
Organization model.

An organization owns one unit hierarchy, one role hierarchy, a permission
catalogue and a set of data-sharing rules.
"""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, generate_ulid


class Organization(Base, TimestampMixin):
    """Top-level tenant that scopes units, roles and permissions."""
    __tablename__ = "organizations"

    # Primary key using ULID
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name!r})>"
