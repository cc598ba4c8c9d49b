"""
Role hierarchy operations.

Routes stay thin and call into here; every multi-row write runs inside
``transaction`` so it commits once or not at all.
"""
from collections.abc import Collection

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import transaction
from app.core.errors import InvalidInputError, NotFoundError
from app.core.tree.builder import build_hierarchy
from app.core.tree.mutations import (
    cascade_delete, compute_level, move_node, next_sort_order, resolve_parent
)
from app.core.tree.statistics import count_where, summarize
from app.features.permissions.models import RolePermission
from app.features.roles.models import Role
from app.features.roles.schemas import RoleCreate, RoleNode, RoleStatistics, RoleUpdate
from app.features.units.models import UnitRoleAssignment, UserUnitAssignment
from app.utils import get_logger

log = get_logger(__name__)


async def list_roles(db: AsyncSession, organization_id: str) -> list[Role]:
    """Flat list in sibling order."""
    result = await db.execute(
        select(Role)
        .where(Role.organization_id == organization_id)
        .order_by(Role.level, Role.sort_order, Role.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_role_tree(db: AsyncSession, organization_id: str) -> list[RoleNode]:
    return build_hierarchy(await list_roles(db, organization_id), RoleNode.model_validate)


async def get_role_statistics(
    db: AsyncSession, organization_id: str, expanded_ids: Collection[str] = ()
) -> RoleStatistics:
    forest = await get_role_tree(db, organization_id)
    summary = summarize(forest, expanded_ids)
    return RoleStatistics(
        **summary.model_dump(),
        shared_roles=count_where(forest, lambda node: node.share_data_with_peers),
    )


async def get_role(db: AsyncSession, role_id: str) -> Role:
    """Fetch a role with its grants reloaded from the database."""
    result = await db.execute(
        select(Role).where(Role.id == role_id).execution_options(populate_existing=True)
    )
    role = result.scalar_one_or_none()
    if role is None:
        raise NotFoundError("Role not found")
    return role


async def create_role(db: AsyncSession, organization_id: str, data: RoleCreate) -> Role:
    """Create a role one level below its parent (level 0 without one)."""
    name = data.name.strip()
    if not name:
        raise InvalidInputError("Role name is required")

    async with transaction(db):
        parent = await resolve_parent(db, Role, organization_id, data.parent_id, "role")
        role = Role(
            organization_id=organization_id,
            name=name,
            description=data.description,
            parent_id=data.parent_id,
            level=compute_level(parent),
            sort_order=await next_sort_order(db, Role, organization_id, data.parent_id),
            share_data_with_peers=data.share_data_with_peers,
        )
        db.add(role)

    log.info("Created role %s (%s) at level %d", role.id, role.name, role.level)
    return await get_role(db, role.id)


async def update_role(db: AsyncSession, role: Role, data: RoleUpdate) -> Role:
    changes = data.model_dump(exclude_unset=True)
    if "name" in changes:
        if changes["name"] is None or not changes["name"].strip():
            raise InvalidInputError("Role name is required")
        changes["name"] = changes["name"].strip()

    async with transaction(db):
        for field, value in changes.items():
            if value is not None:
                setattr(role, field, value)

    return await get_role(db, role.id)


async def move_role(db: AsyncSession, role: Role, parent_id: str | None) -> Role:
    async with transaction(db):
        sort_order = await next_sort_order(db, Role, role.organization_id, parent_id)
        await move_node(db, Role, role, parent_id, "role")
        role.sort_order = sort_order
    return await get_role(db, role.id)


async def delete_role(db: AsyncSession, role_id: str) -> list[str]:
    """
    Delete a role with all its sub-roles.

    Grants, unit role links and user placements that use any removed role go
    with it.
    """
    async def clear_references(role_ids: list[str]) -> None:
        for model in (RolePermission, UnitRoleAssignment, UserUnitAssignment):
            await db.execute(
                delete(model)
                .where(model.role_id.in_(role_ids))
                .execution_options(synchronize_session=False)
            )

    async with transaction(db):
        deleted = await cascade_delete(db, Role, role_id, clear_references)
    return deleted
