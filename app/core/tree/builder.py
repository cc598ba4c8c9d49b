"""
Build in-memory forests from flat parent-referencing rows.

Units and roles are stored with a ``parent_id`` column and fetched as flat
lists. ``build_hierarchy`` turns such a list into a forest of nodes with
``children`` populated. Nodes are created fresh on each call through a
``to_node`` factory, so the input rows are never touched and the same input
always yields the same forest.
"""
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, Protocol, TypeVar

from app.utils import get_logger

log = get_logger(__name__)


class HierarchyRecord(Protocol):
    """Flat row that points at its parent."""
    id: str
    parent_id: str | None


class TreeNode(Protocol):
    """Node of an in-memory tree."""
    id: str
    children: list[Any]


R = TypeVar("R", bound=HierarchyRecord)
N = TypeVar("N", bound=TreeNode)


def walk(forest: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node of the forest, pre-order."""
    for node in forest:
        yield node
        yield from walk(node.children)


def build_hierarchy(records: Iterable[R], to_node: Callable[[R], N]) -> list[N]:
    """
    Restructure flat records into a forest.

    Args:
        records: rows exposing ``id`` and ``parent_id``, in the order children
            should appear under their parent (typically created_at order)
        to_node: factory turning one row into a node with a ``children`` list

    Returns:
        Root nodes in input order. A record whose parent is missing from the
        input is a root. A record stuck on a parent cycle is cut loose from
        its parent and promoted to a root.
    """
    nodes: dict[str, N] = {}
    parent_of: dict[str, str | None] = {}
    order: list[str] = []

    for record in records:
        node = to_node(record)
        node.children = []
        nodes[record.id] = node
        parent_of[record.id] = record.parent_id
        order.append(record.id)

    roots: list[N] = []
    for node_id in order:
        node = nodes[node_id]
        parent_id = parent_of[node_id]
        parent = nodes.get(parent_id) if parent_id is not None else None
        if parent is None:
            if parent_id is not None:
                log.debug("Parent %s of %s not in input, treating as root", parent_id, node_id)
            roots.append(node)
        else:
            parent.children.append(node)

    if len(order) > len(roots):
        _promote_unreachable(roots, nodes, parent_of, order)
    return roots


def _promote_unreachable(
    roots: list[N],
    nodes: dict[str, N],
    parent_of: dict[str, str | None],
    order: list[str],
) -> None:
    reachable = {node.id for node in walk(roots)}
    if len(reachable) == len(order):
        return

    for node_id in order:
        if node_id in reachable:
            continue
        # Every unreachable node hangs off a cycle; climb to a node on it.
        seen: set[str] = set()
        cycle_id = node_id
        while cycle_id not in seen:
            seen.add(cycle_id)
            cycle_id = parent_of[cycle_id]  # type: ignore[assignment]

        node = nodes[cycle_id]
        parent = nodes[parent_of[cycle_id]]  # type: ignore[index]
        parent.children = [child for child in parent.children if child is not node]
        roots.append(node)
        reachable.update(n.id for n in walk([node]))
        log.warning("Parent cycle detected at %s, promoting it to a root", cycle_id)
