from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from app.core.tree.builder import build_hierarchy
from app.core.tree.statistics import (
    all_node_ids,
    average_branching,
    count_where,
    expansion_ratio,
    leaf_count,
    max_depth,
    summarize,
    total_nodes,
)


@dataclass
class Row:
    id: str
    parent_id: str | None
    shared: bool = False


@dataclass
class Node:
    id: str
    shared: bool = False
    children: list[Node] = field(default_factory=list)


def _forest(rows: list[Row]) -> list[Node]:
    return build_hierarchy(rows, lambda row: Node(id=row.id, shared=row.shared))


def test_chain_of_three() -> None:
    forest = _forest([Row("root", None), Row("child1", "root"), Row("child2", "child1")])

    assert max_depth(forest) == 3
    assert total_nodes(forest) == 3
    assert leaf_count(forest) == 1


def test_empty_forest() -> None:
    stats = summarize([])

    assert stats.total_nodes == 0
    assert stats.max_depth == 0
    assert stats.leaf_count == 0
    assert stats.average_branching == 0.0
    assert stats.expansion_ratio == 0.0


def test_single_node() -> None:
    forest = _forest([Row("solo", None)])

    assert (total_nodes(forest), max_depth(forest), leaf_count(forest)) == (1, 1, 1)
    assert average_branching(forest) == 0.0


def test_average_branching_counts_only_parents() -> None:
    # root has 2 children, a has 3, b and the grandchildren have none
    forest = _forest(
        [Row("root", None), Row("a", "root"), Row("b", "root")]
        + [Row(f"a{i}", "a") for i in range(3)]
    )

    assert average_branching(forest) == pytest.approx(2.5)
    assert leaf_count(forest) == 4


def test_multiple_roots() -> None:
    forest = _forest([Row("r1", None), Row("r2", None), Row("r2a", "r2")])

    assert total_nodes(forest) == 3
    assert max_depth(forest) == 2
    assert leaf_count(forest) == 2


def test_expansion_ratio_counts_distinct_ids_in_the_forest() -> None:
    forest = _forest([Row("root", None), Row("a", "root"), Row("b", "root"), Row("c", "a")])

    assert expansion_ratio(forest, ["root", "a"]) == pytest.approx(0.5)
    assert expansion_ratio(forest, ["root", "root", "root"]) == pytest.approx(0.25)
    assert expansion_ratio(forest, ["root", "gone"]) == pytest.approx(0.25)

    stats = summarize(forest, ["a", "a", "missing"])
    assert stats.expanded_count == 1
    assert stats.expansion_ratio == pytest.approx(0.25)


def test_expand_all_lists_every_id() -> None:
    forest = _forest([Row("root", None), Row("a", "root"), Row("b", "a")])

    assert all_node_ids(forest) == ["root", "a", "b"]
    assert summarize(forest, all_node_ids(forest)).expansion_ratio == pytest.approx(1.0)


def test_count_where() -> None:
    forest = _forest([Row("ceo", None, shared=True), Row("cto", "ceo"), Row("cfo", "ceo", shared=True)])

    assert count_where(forest, lambda node: node.shared) == 2
