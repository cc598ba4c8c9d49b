"""
Links between users, units and roles.

A user holds at most one role per unit: placing the same user in the same
unit again updates the existing row. A unit may offer any number of roles,
each at most once.
"""
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import transaction
from app.core.errors import InvalidInputError, NotFoundError
from app.features.assignments.schemas import UserAssignmentRef
from app.features.roles.models import Role
from app.features.units.models import OrganizationUnit, UnitRoleAssignment, UserUnitAssignment
from app.features.users.models import User
from app.utils import get_logger

log = get_logger(__name__)


async def _get_or_404(db: AsyncSession, model: type, entity_id: str, label: str):
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


async def get_assignment(db: AsyncSession, assignment_id: str) -> UserUnitAssignment:
    result = await db.execute(
        select(UserUnitAssignment)
        .where(UserUnitAssignment.id == assignment_id)
        .execution_options(populate_existing=True)
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise NotFoundError("Assignment not found")
    return assignment


async def list_user_assignments(db: AsyncSession, user_id: str) -> list[UserUnitAssignment]:
    await _get_or_404(db, User, user_id, "User")
    result = await db.execute(
        select(UserUnitAssignment)
        .where(UserUnitAssignment.user_id == user_id)
        .order_by(UserUnitAssignment.created_at, UserUnitAssignment.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def assign_user_to_unit(
    db: AsyncSession,
    user_id: str,
    unit_id: str,
    role_id: str,
    notes: str | None = None,
) -> UserUnitAssignment:
    """
    Place a user in a unit with a role, keyed on (user, unit).

    Raises:
        NotFoundError: user, unit or role does not exist
        InvalidInputError: role and unit belong to different organizations
    """
    await _get_or_404(db, User, user_id, "User")
    unit = await _get_or_404(db, OrganizationUnit, unit_id, "Unit")
    role = await _get_or_404(db, Role, role_id, "Role")
    if role.organization_id != unit.organization_id:
        raise InvalidInputError("Role and unit belong to different organizations")

    async with transaction(db):
        result = await db.execute(
            select(UserUnitAssignment).where(
                UserUnitAssignment.user_id == user_id,
                UserUnitAssignment.unit_id == unit_id,
            )
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            assignment = UserUnitAssignment(user_id=user_id, unit_id=unit_id, role_id=role_id, notes=notes)
            db.add(assignment)
            log.info("Assigned user %s to unit %s as role %s", user_id, unit_id, role_id)
        else:
            assignment.role_id = role_id
            assignment.notes = notes
            log.info("Updated user %s in unit %s to role %s", user_id, unit_id, role_id)

    return await get_assignment(db, assignment.id)


async def remove_user_from_unit(db: AsyncSession, user_id: str, unit_id: str) -> None:
    result = await db.execute(
        select(UserUnitAssignment.id).where(
            UserUnitAssignment.user_id == user_id,
            UserUnitAssignment.unit_id == unit_id,
        )
    )
    assignment_id = result.scalar_one_or_none()
    if assignment_id is None:
        raise NotFoundError("Assignment not found")

    async with transaction(db):
        await db.execute(
            delete(UserUnitAssignment)
            .where(UserUnitAssignment.id == assignment_id)
            .execution_options(synchronize_session=False)
        )
    log.info("Removed user %s from unit %s", user_id, unit_id)


async def assign_role_to_unit(db: AsyncSession, unit_id: str, role_id: str) -> None:
    """Offer a role inside a unit; a link that already exists is left as is."""
    unit = await _get_or_404(db, OrganizationUnit, unit_id, "Unit")
    role = await _get_or_404(db, Role, role_id, "Role")
    if role.organization_id != unit.organization_id:
        raise InvalidInputError("Role and unit belong to different organizations")

    result = await db.execute(
        select(UnitRoleAssignment.id).where(
            UnitRoleAssignment.unit_id == unit_id,
            UnitRoleAssignment.role_id == role_id,
        )
    )
    if result.scalar_one_or_none() is not None:
        return

    async with transaction(db):
        db.add(UnitRoleAssignment(unit_id=unit_id, role_id=role_id))
    log.info("Linked role %s to unit %s", role_id, unit_id)


async def remove_role_from_unit(db: AsyncSession, unit_id: str, role_id: str) -> None:
    result = await db.execute(
        select(UnitRoleAssignment.id).where(
            UnitRoleAssignment.unit_id == unit_id,
            UnitRoleAssignment.role_id == role_id,
        )
    )
    link_id = result.scalar_one_or_none()
    if link_id is None:
        raise NotFoundError("Role is not assigned to this unit")

    async with transaction(db):
        await db.execute(
            delete(UnitRoleAssignment)
            .where(UnitRoleAssignment.id == link_id)
            .execution_options(synchronize_session=False)
        )
    log.info("Unlinked role %s from unit %s", role_id, unit_id)


async def replace_unit_assignments(
    db: AsyncSession,
    unit: OrganizationUnit,
    role_ids: Iterable[str] | None,
    users: Iterable[UserAssignmentRef] | None,
) -> None:
    """
    Rewrite a unit's role links and/or user placements.

    ``None`` leaves that side untouched. Does not commit: callers run it inside
    their own ``transaction`` together with the unit write, so the old rows
    are only gone once the new ones are in place.
    """
    if role_ids is not None:
        wanted_roles = list(dict.fromkeys(role_ids))
        await _check_roles(db, unit.organization_id, wanted_roles)
        await db.execute(
            delete(UnitRoleAssignment)
            .where(UnitRoleAssignment.unit_id == unit.id)
            .execution_options(synchronize_session=False)
        )
        db.add_all(UnitRoleAssignment(unit_id=unit.id, role_id=role_id) for role_id in wanted_roles)

    if users is not None:
        # last entry wins for a repeated user
        wanted_users = {entry.user_id: entry.role_id for entry in users}
        await _check_roles(db, unit.organization_id, set(wanted_users.values()))
        await _check_users(db, wanted_users.keys())
        await db.execute(
            delete(UserUnitAssignment)
            .where(UserUnitAssignment.unit_id == unit.id)
            .execution_options(synchronize_session=False)
        )
        db.add_all(
            UserUnitAssignment(user_id=user_id, unit_id=unit.id, role_id=role_id)
            for user_id, role_id in wanted_users.items()
        )

    await db.flush()


async def _check_roles(db: AsyncSession, organization_id: str, role_ids: Iterable[str]) -> None:
    role_ids = set(role_ids)
    if not role_ids:
        return
    result = await db.execute(
        select(Role.id).where(Role.id.in_(role_ids), Role.organization_id == organization_id)
    )
    missing = role_ids - set(result.scalars().all())
    if missing:
        raise NotFoundError(f"Role not found: {', '.join(sorted(missing))}")


async def _check_users(db: AsyncSession, user_ids: Iterable[str]) -> None:
    user_ids = set(user_ids)
    if not user_ids:
        return
    result = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    missing = user_ids - set(result.scalars().all())
    if missing:
        raise NotFoundError(f"User not found: {', '.join(sorted(missing))}")
