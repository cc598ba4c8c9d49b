"""
Data-sharing rule operations.

Rules form a flat list per organization; the only structural check is that a
rule links two different units of that organization.
"""
from collections.abc import Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import transaction
from app.core.errors import InvalidInputError, NotFoundError
from app.features.data_sharing.models import AccessLevel, DataSharingRule
from app.features.data_sharing.schemas import (
    DataSharingRuleCreate,
    DataSharingRuleUpdate,
    DataSharingStatistics,
)
from app.features.units.models import OrganizationUnit
from app.utils import get_logger

log = get_logger(__name__)


async def list_rules(
    db: AsyncSession,
    organization_id: str,
    search: str | None = None,
    access_level: AccessLevel | None = None,
    active: bool | None = None,
) -> list[DataSharingRule]:
    """Newest first, optionally filtered by text, access level and status."""
    query = select(DataSharingRule).where(DataSharingRule.organization_id == organization_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(DataSharingRule.name.ilike(pattern), DataSharingRule.description.ilike(pattern))
        )
    if access_level is not None:
        query = query.where(DataSharingRule.access_level == access_level)
    if active is not None:
        query = query.where(DataSharingRule.is_active == active)

    result = await db.execute(
        query.order_by(DataSharingRule.created_at.desc(), DataSharingRule.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def compute_statistics(rules: Sequence[DataSharingRule]) -> DataSharingStatistics:
    data_types = {data_type for rule in rules for data_type in rule.data_types}
    units = {rule.source_unit_id for rule in rules} | {rule.target_unit_id for rule in rules}
    return DataSharingStatistics(
        total_rules=len(rules),
        active_rules=sum(1 for rule in rules if rule.is_active),
        total_data_types=len(data_types),
        units_involved=len(units),
    )


async def get_statistics(db: AsyncSession, organization_id: str) -> DataSharingStatistics:
    return compute_statistics(await list_rules(db, organization_id))


async def get_rule(db: AsyncSession, rule_id: str) -> DataSharingRule:
    result = await db.execute(
        select(DataSharingRule).where(DataSharingRule.id == rule_id).execution_options(populate_existing=True)
    )
    rule = result.scalar_one_or_none()
    if rule is None:
        raise NotFoundError("Data-sharing rule not found")
    return rule


async def _check_units(db: AsyncSession, organization_id: str, source_unit_id: str, target_unit_id: str) -> None:
    if source_unit_id == target_unit_id:
        raise InvalidInputError("Source and target units must differ")
    for unit_id in (source_unit_id, target_unit_id):
        unit = await db.get(OrganizationUnit, unit_id)
        if unit is None:
            raise NotFoundError(f"Unit {unit_id} not found")
        if unit.organization_id != organization_id:
            raise InvalidInputError(f"Unit {unit_id} belongs to another organization")


async def create_rule(db: AsyncSession, organization_id: str, data: DataSharingRuleCreate) -> DataSharingRule:
    if not data.name.strip():
        raise InvalidInputError("Rule name is required")
    await _check_units(db, organization_id, data.source_unit_id, data.target_unit_id)

    async with transaction(db):
        rule = DataSharingRule(organization_id=organization_id, **data.model_dump())
        rule.name = rule.name.strip()
        db.add(rule)

    log.info("Created data-sharing rule %s (%s -> %s)", rule.id, rule.source_unit_id, rule.target_unit_id)
    return await get_rule(db, rule.id)


async def update_rule(db: AsyncSession, rule: DataSharingRule, data: DataSharingRuleUpdate) -> DataSharingRule:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise InvalidInputError("Rule name is required")
    if "source_unit_id" in changes or "target_unit_id" in changes:
        await _check_units(
            db,
            rule.organization_id,
            changes.get("source_unit_id", rule.source_unit_id),
            changes.get("target_unit_id", rule.target_unit_id),
        )

    async with transaction(db):
        for field, value in changes.items():
            setattr(rule, field, value)

    return await get_rule(db, rule.id)


async def toggle_rule(db: AsyncSession, rule: DataSharingRule) -> DataSharingRule:
    """Flip a rule between active and inactive."""
    async with transaction(db):
        rule.is_active = not rule.is_active
    log.info("Data-sharing rule %s is now %s", rule.id, "active" if rule.is_active else "inactive")
    return await get_rule(db, rule.id)


async def delete_rule(db: AsyncSession, rule_id: str) -> None:
    await get_rule(db, rule_id)
    async with transaction(db):
        await db.execute(
            delete(DataSharingRule)
            .where(DataSharingRule.id == rule_id)
            .execution_options(synchronize_session=False)
        )
    log.info("Deleted data-sharing rule %s", rule_id)
