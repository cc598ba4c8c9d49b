"""
Read-only statistics and expansion helpers over any forest of nodes
exposing a ``children`` list. Shared by the unit tree and the role tree.
"""
from collections.abc import Callable, Collection, Sequence

from pydantic import BaseModel, Field

from app.core.tree.builder import TreeNode, walk


class TreeStatistics(BaseModel):
    """Summary of a forest, as shown in the statistics panels."""
    total_nodes: int = Field(..., description="Number of nodes in the forest")
    max_depth: int = Field(..., description="Number of levels, 0 for an empty forest")
    leaf_count: int = Field(..., description="Nodes without children")
    average_branching: float = Field(..., description="Mean child count among nodes that have children")
    expanded_count: int = Field(..., description="Distinct expanded ids present in the forest")
    expansion_ratio: float = Field(..., description="expanded_count / total_nodes, 0 when empty")


def total_nodes(forest: Sequence[TreeNode]) -> int:
    return sum(1 + total_nodes(node.children) for node in forest)


def max_depth(forest: Sequence[TreeNode]) -> int:
    if not forest:
        return 0
    return max(1 + max_depth(node.children) for node in forest)


def leaf_count(forest: Sequence[TreeNode]) -> int:
    return sum(1 if not node.children else leaf_count(node.children) for node in forest)


def average_branching(forest: Sequence[TreeNode]) -> float:
    """Mean number of children, counting only nodes that have at least one."""
    branch_sizes = [len(node.children) for node in walk(forest) if node.children]
    if not branch_sizes:
        return 0.0
    return sum(branch_sizes) / len(branch_sizes)


def expanded_in(forest: Sequence[TreeNode], expanded_ids: Collection[str]) -> set[str]:
    """Distinct expanded ids that belong to ``forest``."""
    return set(expanded_ids).intersection(all_node_ids(forest))


def expansion_ratio(forest: Sequence[TreeNode], expanded_ids: Collection[str]) -> float:
    total = total_nodes(forest)
    if total == 0:
        return 0.0
    return len(expanded_in(forest, expanded_ids)) / total


def count_where(forest: Sequence[TreeNode], predicate: Callable[[TreeNode], bool]) -> int:
    return sum(1 for node in walk(forest) if predicate(node))


def all_node_ids(forest: Sequence[TreeNode]) -> list[str]:
    """Ids of every node, pre-order."""
    return [node.id for node in walk(forest)]


def summarize(forest: Sequence[TreeNode], expanded_ids: Collection[str] = ()) -> TreeStatistics:
    return TreeStatistics(
        total_nodes=total_nodes(forest),
        max_depth=max_depth(forest),
        leaf_count=leaf_count(forest),
        average_branching=average_branching(forest),
        expanded_count=len(expanded_in(forest, expanded_ids)),
        expansion_ratio=expansion_ratio(forest, expanded_ids),
    )
