"""
Structural writes shared by the unit and role hierarchies.

Both ``OrganizationUnit`` and ``Role`` rows carry ``id``, ``organization_id``,
``parent_id`` and ``level`` columns; the helpers below only rely on those.
Callers run them inside ``app.core.database.engine.transaction`` so a
multi-row change commits once or not at all.
"""
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import HierarchyCycleError, InvalidInputError, NotFoundError
from app.utils import get_logger

log = get_logger(__name__)


def compute_level(parent: Any | None) -> int:
    """Depth of a node placed under ``parent`` (0 for a root)."""
    return 0 if parent is None else parent.level + 1


async def next_sort_order(
    db: AsyncSession, model: type, organization_id: str, parent_id: str | None
) -> int:
    """Position after the last existing sibling under ``parent_id``."""
    sibling_filter = model.parent_id.is_(None) if parent_id is None else model.parent_id == parent_id
    result = await db.execute(
        select(func.max(model.sort_order)).where(model.organization_id == organization_id, sibling_filter)
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def resolve_parent(
    db: AsyncSession,
    model: type,
    organization_id: str,
    parent_id: str | None,
    label: str,
) -> Any | None:
    """
    Fetch the prospective parent of a new or moved node.

    Raises:
        NotFoundError: parent id given but no such row
        InvalidInputError: parent belongs to another organization
    """
    if parent_id is None:
        return None
    parent = await db.get(model, parent_id)
    if parent is None:
        raise NotFoundError(f"Parent {label} not found")
    if parent.organization_id != organization_id:
        raise InvalidInputError(f"Parent {label} belongs to another organization")
    return parent


async def collect_subtree_ids(db: AsyncSession, model: type, node_id: str) -> list[str]:
    """
    Ids of ``node_id`` and all its descendants, depth-first with every child
    listed before its parent (the order in which they can be deleted).
    """
    ordered: list[str] = []

    async def visit(current_id: str, path: frozenset[str]) -> None:
        result = await db.execute(
            select(model.id).where(model.parent_id == current_id).order_by(model.sort_order, model.id)
        )
        for child_id in result.scalars().all():
            if child_id in path:
                raise HierarchyCycleError(f"Parent cycle through {child_id}")
            await visit(child_id, path | {child_id})
        ordered.append(current_id)

    await visit(node_id, frozenset({node_id}))
    return ordered


async def cascade_delete(
    db: AsyncSession,
    model: type,
    node_id: str,
    before_delete: Callable[[list[str]], Awaitable[None]] | None = None,
) -> list[str]:
    """
    Delete a node and its whole subtree, children before parents.

    Args:
        db: session, the caller owns the transaction
        model: mapped class with a self-referencing ``parent_id``
        node_id: root of the subtree to remove
        before_delete: hook receiving all subtree ids, used to clear rows
            that reference the nodes (assignments, grants, sharing rules)

    Returns:
        The deleted ids in deletion order.
    """
    if await db.get(model, node_id) is None:
        raise NotFoundError(f"{model.__name__} not found")

    subtree_ids = await collect_subtree_ids(db, model, node_id)
    if before_delete is not None:
        await before_delete(subtree_ids)

    for current_id in subtree_ids:
        await db.execute(
            delete(model).where(model.id == current_id).execution_options(synchronize_session=False)
        )
    log.info("Deleted %s %s with %d descendant(s)", model.__name__, node_id, len(subtree_ids) - 1)
    return subtree_ids


async def ancestor_ids(db: AsyncSession, model: type, node_id: str | None) -> list[str]:
    """Ids from ``node_id`` up to its root, inclusive."""
    chain: list[str] = []
    current_id = node_id
    while current_id is not None:
        if current_id in chain:
            raise HierarchyCycleError(f"Parent cycle through {current_id}")
        chain.append(current_id)
        result = await db.execute(select(model.parent_id).where(model.id == current_id))
        current_id = result.scalar_one_or_none()
    return chain


async def move_node(
    db: AsyncSession,
    model: type,
    node: Any,
    new_parent_id: str | None,
    label: str,
) -> None:
    """
    Reparent ``node`` and recompute ``level`` across its subtree.

    Raises:
        HierarchyCycleError: the new parent is the node or one of its descendants
    """
    parent = await resolve_parent(db, model, node.organization_id, new_parent_id, label)
    if parent is not None and node.id in await ancestor_ids(db, model, parent.id):
        raise HierarchyCycleError(f"Cannot move a {label} under itself or its descendants")

    node.parent_id = new_parent_id
    node.level = compute_level(parent)
    await db.flush()

    frontier = [(node.id, node.level)]
    while frontier:
        current_id, current_level = frontier.pop()
        await db.execute(
            update(model)
            .where(model.parent_id == current_id)
            .values(level=current_level + 1)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(select(model.id).where(model.parent_id == current_id))
        frontier.extend((child_id, current_level + 1) for child_id in result.scalars().all())
    log.info("Moved %s %s under %s", label, node.id, new_parent_id)
