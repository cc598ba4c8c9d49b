"""
Organization lookup and ensure-by-name.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config
from app.core.database.engine import transaction
from app.core.errors import ConflictError
from app.features.organizations.models import Organization
from app.utils import get_logger

log = get_logger(__name__)


async def list_organizations(db: AsyncSession) -> list[Organization]:
    result = await db.execute(select(Organization).order_by(Organization.name))
    return list(result.scalars().all())


async def _find_by_name(db: AsyncSession, name: str) -> Organization | None:
    result = await db.execute(select(Organization).where(Organization.name == name))
    return result.scalar_one_or_none()


async def ensure_organization(
    db: AsyncSession, name: str | None = None, description: str | None = None
) -> tuple[Organization, bool]:
    """
    Return the organization called ``name``, creating it if needed.

    Falls back to ``DEFAULT_ORGANIZATION_NAME`` when no name is given. The
    boolean is True when a row was created.
    """
    name = (name or "").strip() or config.DEFAULT_ORGANIZATION_NAME

    organization = await _find_by_name(db, name)
    if organization is not None:
        return organization, False

    try:
        async with transaction(db):
            organization = Organization(name=name, description=description)
            db.add(organization)
    except ConflictError:
        # created concurrently under the same name
        organization = await _find_by_name(db, name)
        if organization is None:
            raise
        return organization, False

    log.info("Created organization %s (%s)", organization.id, organization.name)
    return organization, True
