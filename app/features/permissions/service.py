"""
Permission catalogue, direct grants and the computed role views.

Only direct grants are stored. Inherited entries come from
``PermissionInheritanceResolver`` on every read.
"""
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import transaction
from app.core.errors import InvalidInputError, NotFoundError
from app.features.permissions.inheritance import Grant, PermissionInheritanceResolver
from app.features.permissions.models import Permission, RolePermission
from app.features.permissions.schemas import (
    EffectivePermissionResponse,
    PermissionCreate,
    PermissionMatrixResponse,
    PermissionMatrixRow,
    PermissionResponse,
    PermissionUpdate,
    RolePermissionsView,
)
from app.features.roles.models import Role
from app.utils import get_logger

log = get_logger(__name__)


# ============================================================================
# Catalogue
# ============================================================================

async def list_permissions(
    db: AsyncSession, organization_id: str, include_inactive: bool = True
) -> list[Permission]:
    query = select(Permission).where(Permission.organization_id == organization_id)
    if not include_inactive:
        query = query.where(Permission.is_active == True)  # noqa: E712
    result = await db.execute(query.order_by(Permission.category, Permission.name))
    return list(result.scalars().all())


async def get_permission(db: AsyncSession, permission_id: str) -> Permission:
    result = await db.execute(
        select(Permission).where(Permission.id == permission_id).execution_options(populate_existing=True)
    )
    permission = result.scalar_one_or_none()
    if permission is None:
        raise NotFoundError("Permission not found")
    return permission


async def create_permission(db: AsyncSession, organization_id: str, data: PermissionCreate) -> Permission:
    name = data.name.strip()
    if not name:
        raise InvalidInputError("Permission name is required")

    async with transaction(db):
        permission = Permission(
            organization_id=organization_id,
            name=name,
            description=data.description,
            category=data.category,
            resource=data.resource.strip(),
        )
        db.add(permission)

    log.info("Created permission %s (%s:%s)", permission.id, permission.resource, permission.name)
    return await get_permission(db, permission.id)


async def update_permission(db: AsyncSession, permission: Permission, data: PermissionUpdate) -> Permission:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes and not changes["name"].strip():
        raise InvalidInputError("Permission name is required")

    async with transaction(db):
        for field, value in changes.items():
            setattr(permission, field, value.strip() if field in ("name", "resource") else value)

    return await get_permission(db, permission.id)


async def delete_permission(db: AsyncSession, permission_id: str) -> None:
    """Remove a permission and every grant of it."""
    await get_permission(db, permission_id)
    async with transaction(db):
        await db.execute(
            delete(RolePermission)
            .where(RolePermission.permission_id == permission_id)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            delete(Permission)
            .where(Permission.id == permission_id)
            .execution_options(synchronize_session=False)
        )
    log.info("Deleted permission %s", permission_id)


# ============================================================================
# Grants
# ============================================================================

async def _find_grant(db: AsyncSession, role_id: str, permission_id: str) -> RolePermission | None:
    result = await db.execute(
        select(RolePermission)
        .where(RolePermission.role_id == role_id, RolePermission.permission_id == permission_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def grant_permission(
    db: AsyncSession, role: Role, permission_id: str, can_delegate: bool = False
) -> RolePermission:
    """
    Grant a permission directly to a role, keyed on (role, permission).

    A second call for the same pair updates ``can_delegate`` on the existing
    grant and marks it granted again.
    """
    permission = await get_permission(db, permission_id)
    if permission.organization_id != role.organization_id:
        raise InvalidInputError("Permission and role belong to different organizations")

    async with transaction(db):
        grant = await _find_grant(db, role.id, permission_id)
        if grant is None:
            grant = RolePermission(
                role_id=role.id, permission_id=permission_id, granted=True, can_delegate=can_delegate
            )
            db.add(grant)
        else:
            grant.granted = True
            grant.can_delegate = can_delegate

    log.info("Granted %s to role %s (delegable=%s)", permission_id, role.id, can_delegate)
    return await _find_grant(db, role.id, permission_id)


async def revoke_permission(db: AsyncSession, role_id: str, permission_id: str) -> None:
    grant = await _find_grant(db, role_id, permission_id)
    if grant is None:
        raise NotFoundError("Permission is not granted to this role")

    async with transaction(db):
        await db.execute(
            delete(RolePermission)
            .where(RolePermission.id == grant.id)
            .execution_options(synchronize_session=False)
        )
    log.info("Revoked %s from role %s", permission_id, role_id)


async def toggle_delegation(db: AsyncSession, role_id: str, permission_id: str) -> RolePermission:
    """Flip ``can_delegate`` on an existing direct grant."""
    grant = await _find_grant(db, role_id, permission_id)
    if grant is None:
        raise NotFoundError("Permission is not granted to this role")

    async with transaction(db):
        grant.can_delegate = not grant.can_delegate

    return await _find_grant(db, role_id, permission_id)


# ============================================================================
# Computed views
# ============================================================================

async def load_resolver(db: AsyncSession, organization_id: str) -> tuple[PermissionInheritanceResolver, list[Role]]:
    """Resolver over the current roles and grants of one organization."""
    roles_result = await db.execute(
        select(Role)
        .where(Role.organization_id == organization_id)
        .order_by(Role.level, Role.sort_order, Role.id)
    )
    roles = list(roles_result.scalars().all())

    grants_result = await db.execute(
        select(RolePermission)
        .join(Role, Role.id == RolePermission.role_id)
        .where(Role.organization_id == organization_id)
        .order_by(RolePermission.created_at, RolePermission.id)
        .execution_options(populate_existing=True)
    )
    grants = [Grant.from_record(record) for record in grants_result.scalars().all()]

    resolver = PermissionInheritanceResolver({role.id: role.parent_id for role in roles}, grants)
    return resolver, roles


async def _permission_lookup(db: AsyncSession, organization_id: str) -> dict[str, PermissionResponse]:
    return {
        permission.id: PermissionResponse.model_validate(permission)
        for permission in await list_permissions(db, organization_id)
    }


def _to_response(grant: Grant, permissions: dict[str, PermissionResponse]) -> EffectivePermissionResponse:
    return EffectivePermissionResponse(
        role_id=grant.role_id,
        permission_id=grant.permission_id,
        granted=grant.granted,
        can_delegate=grant.can_delegate,
        inherited_from=grant.inherited_from,
        permission=permissions.get(grant.permission_id),
    )


async def get_role_permissions(db: AsyncSession, role: Role) -> RolePermissionsView:
    """Direct, inherited and effective permissions of one role."""
    resolver, _ = await load_resolver(db, role.organization_id)
    permissions = await _permission_lookup(db, role.organization_id)
    return RolePermissionsView(
        role_id=role.id,
        direct=[_to_response(grant, permissions) for grant in resolver.direct(role.id)],
        inherited=[_to_response(grant, permissions) for grant in resolver.inherited(role.id)],
        effective=[_to_response(grant, permissions) for grant in resolver.effective(role.id)],
    )


async def get_permission_matrix(db: AsyncSession, organization_id: str) -> PermissionMatrixResponse:
    """Effective permissions of every role, plus grant counters."""
    resolver, roles = await load_resolver(db, organization_id)
    permissions = await _permission_lookup(db, organization_id)

    rows: list[PermissionMatrixRow] = []
    direct_grants = inherited_grants = delegable_grants = 0
    for role in roles:
        effective = resolver.effective(role.id)
        for grant in effective:
            if grant.inherited_from is None:
                direct_grants += 1
            else:
                inherited_grants += 1
        delegates = [grant.permission_id for grant in resolver.inheritable(role.id)]
        delegable_grants += len(delegates)
        rows.append(
            PermissionMatrixRow(
                role_id=role.id,
                role_name=role.name,
                level=role.level,
                effective=[_to_response(grant, permissions) for grant in effective],
                delegates=delegates,
            )
        )

    return PermissionMatrixResponse(
        roles=rows,
        total_permissions=len(permissions),
        direct_grants=direct_grants,
        inherited_grants=inherited_grants,
        delegable_grants=delegable_grants,
    )
