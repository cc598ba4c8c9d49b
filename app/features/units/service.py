"""
Organization unit hierarchy operations.

Create, update, move and cascading delete of units, plus the tree and
statistics views. The tree is rebuilt from the database on every call.
"""
from collections.abc import Collection

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import transaction
from app.core.errors import InvalidInputError, NotFoundError
from app.core.tree.builder import build_hierarchy
from app.core.tree.mutations import (
    cascade_delete, compute_level, move_node, next_sort_order, resolve_parent
)
from app.core.tree.statistics import summarize
from app.features.assignments.schemas import UnitSummary
from app.features.assignments.service import replace_unit_assignments
from app.features.data_sharing.models import DataSharingRule
from app.features.units.models import OrganizationUnit, UnitRoleAssignment, UserUnitAssignment
from app.features.units.schemas import UnitCreate, UnitDetail, UnitNode, UnitStatistics, UnitUpdate
from app.utils import get_logger

log = get_logger(__name__)


async def list_units(db: AsyncSession, organization_id: str) -> list[OrganizationUnit]:
    result = await db.execute(
        select(OrganizationUnit)
        .where(OrganizationUnit.organization_id == organization_id)
        .order_by(OrganizationUnit.level, OrganizationUnit.sort_order, OrganizationUnit.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_unit_tree(db: AsyncSession, organization_id: str) -> list[UnitNode]:
    """Root units of the organization with children attached."""
    return build_hierarchy(await list_units(db, organization_id), UnitNode.model_validate)


async def get_unit_statistics(
    db: AsyncSession, organization_id: str, expanded_ids: Collection[str] = ()
) -> UnitStatistics:
    summary = summarize(await get_unit_tree(db, organization_id), expanded_ids)
    return UnitStatistics(**summary.model_dump())


async def get_unit(db: AsyncSession, unit_id: str) -> OrganizationUnit:
    """Fetch a unit with its role links and placements reloaded."""
    result = await db.execute(
        select(OrganizationUnit)
        .where(OrganizationUnit.id == unit_id)
        .execution_options(populate_existing=True)
    )
    unit = result.scalar_one_or_none()
    if unit is None:
        raise NotFoundError("Unit not found")
    return unit


async def get_unit_detail(db: AsyncSession, unit_id: str) -> UnitDetail:
    unit = await get_unit(db, unit_id)
    parent = await db.get(OrganizationUnit, unit.parent_id) if unit.parent_id else None
    result = await db.execute(
        select(OrganizationUnit)
        .where(OrganizationUnit.parent_id == unit.id)
        .order_by(OrganizationUnit.sort_order, OrganizationUnit.id)
    )
    detail = UnitDetail.model_validate(unit)
    detail.parent = UnitSummary.model_validate(parent) if parent is not None else None
    detail.children = [UnitSummary.model_validate(child) for child in result.scalars().all()]
    return detail


async def create_unit(db: AsyncSession, organization_id: str, data: UnitCreate) -> OrganizationUnit:
    """
    Create a unit one level below its parent, together with its role links
    and user placements. Nothing is written if any of them fails.
    """
    name = data.name.strip()
    if not name:
        raise InvalidInputError("Unit name is required")

    async with transaction(db):
        parent = await resolve_parent(db, OrganizationUnit, organization_id, data.parent_id, "unit")
        unit = OrganizationUnit(
            organization_id=organization_id,
            name=name,
            description=data.description,
            parent_id=data.parent_id,
            level=compute_level(parent),
            sort_order=await next_sort_order(db, OrganizationUnit, organization_id, data.parent_id),
        )
        db.add(unit)
        await db.flush()
        await replace_unit_assignments(db, unit, data.assigned_roles, data.assigned_users)

    log.info("Created unit %s (%s) at level %d", unit.id, unit.name, unit.level)
    return await get_unit(db, unit.id)


async def update_unit(db: AsyncSession, unit: OrganizationUnit, data: UnitUpdate) -> OrganizationUnit:
    """
    Update name/description and rewrite the assignment lists that are sent,
    all in one transaction.
    """
    if data.name is not None and not data.name.strip():
        raise InvalidInputError("Unit name is required")

    async with transaction(db):
        if data.name is not None:
            unit.name = data.name.strip()
        if data.description is not None:
            unit.description = data.description
        await replace_unit_assignments(db, unit, data.assigned_roles, data.assigned_users)

    return await get_unit(db, unit.id)


async def move_unit(db: AsyncSession, unit: OrganizationUnit, parent_id: str | None) -> OrganizationUnit:
    async with transaction(db):
        sort_order = await next_sort_order(db, OrganizationUnit, unit.organization_id, parent_id)
        await move_node(db, OrganizationUnit, unit, parent_id, "unit")
        unit.sort_order = sort_order
    return await get_unit(db, unit.id)


async def delete_unit(db: AsyncSession, unit_id: str) -> list[str]:
    """
    Delete a unit with all its descendants.

    Role links, user placements and data-sharing rules touching any removed
    unit are deleted in the same transaction.
    """
    async def clear_references(unit_ids: list[str]) -> None:
        for model in (UnitRoleAssignment, UserUnitAssignment):
            await db.execute(
                delete(model)
                .where(model.unit_id.in_(unit_ids))
                .execution_options(synchronize_session=False)
            )
        await db.execute(
            delete(DataSharingRule)
            .where(
                or_(
                    DataSharingRule.source_unit_id.in_(unit_ids),
                    DataSharingRule.target_unit_id.in_(unit_ids),
                )
            )
            .execution_options(synchronize_session=False)
        )

    async with transaction(db):
        deleted = await cascade_delete(db, OrganizationUnit, unit_id, clear_references)
    return deleted
