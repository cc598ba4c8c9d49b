"""
User directory operations.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import transaction
from app.core.errors import ConflictError, NotFoundError
from app.features.organizations.models import Organization
from app.features.users.models import User
from app.features.users.schemas import UserCreate
from app.utils import get_logger

log = get_logger(__name__)


async def list_users(db: AsyncSession, organization_id: str | None = None) -> list[User]:
    """Newest first; optionally only the members of one organization."""
    query = select(User)
    if organization_id is not None:
        query = query.where(User.organization_id == organization_id)
    result = await db.execute(
        query.order_by(User.created_at.desc(), User.id.desc()).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """
    Raises:
        ConflictError: email already registered
        NotFoundError: organization_id given but unknown
    """
    email = str(data.email).lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("User with this email already exists")
    if data.organization_id is not None and await db.get(Organization, data.organization_id) is None:
        raise NotFoundError("Organization not found")

    async with transaction(db):
        user = User(**data.model_dump(exclude={"email"}), email=email)
        db.add(user)

    log.info("Created user %s (%s)", user.id, user.email)
    return await get_user(db, user.id)
