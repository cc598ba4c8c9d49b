from __future__ import annotations

import pytest

from app.core.errors import HierarchyCycleError
from app.features.permissions.inheritance import Grant, PermissionInheritanceResolver


def _ids(grants: list[Grant]) -> set[str]:
    return {grant.permission_id for grant in grants}


def test_delegable_grant_reaches_child_with_origin() -> None:
    resolver = PermissionInheritanceResolver(
        {"ceo": None, "cto": "ceo"},
        [Grant("ceo", "admin-system", can_delegate=True)],
    )

    effective = resolver.effective("cto")

    assert len(effective) == 1
    assert effective[0].permission_id == "admin-system"
    assert effective[0].inherited_from == "ceo"
    assert effective[0].role_id == "cto"


def test_non_delegable_grant_stays_with_its_role() -> None:
    resolver = PermissionInheritanceResolver(
        {"a": None, "b": "a", "c": "b"},
        [Grant("a", "p", can_delegate=False)],
    )

    assert _ids(resolver.effective("a")) == {"p"}
    assert resolver.effective("b") == []
    assert resolver.effective("c") == []


def test_inheritance_does_not_skip_levels() -> None:
    parents = {"a": None, "b": "a", "c": "b"}

    resolver = PermissionInheritanceResolver(parents, [Grant("a", "p", can_delegate=True)])
    assert _ids(resolver.effective("b")) == {"p"}
    assert resolver.effective("c") == []

    # b passes it on only through its own delegable grant
    resolver = PermissionInheritanceResolver(
        parents,
        [Grant("a", "p", can_delegate=True), Grant("b", "p", can_delegate=True)],
    )
    inherited = resolver.inherited("c")
    assert _ids(inherited) == {"p"}
    assert inherited[0].inherited_from == "b"


def test_direct_grant_wins_over_inherited_entry() -> None:
    resolver = PermissionInheritanceResolver(
        {"a": None, "b": "a", "c": "b"},
        [Grant("a", "p", can_delegate=True), Grant("b", "p", can_delegate=False)],
    )

    effective = resolver.effective("b")
    assert len(effective) == 1
    assert effective[0].inherited_from is None
    assert effective[0].can_delegate is False
    assert resolver.effective("c") == []


def test_inherited_entries_are_not_delegable() -> None:
    resolver = PermissionInheritanceResolver(
        {"a": None, "b": "a"},
        [Grant("a", "p", can_delegate=True)],
    )

    assert [grant.can_delegate for grant in resolver.inherited("b")] == [False]
    assert resolver.inheritable("b") == []
    assert _ids(resolver.inheritable("a")) == {"p"}


def test_direct_excludes_revoked_rows() -> None:
    resolver = PermissionInheritanceResolver(
        {"a": None},
        [Grant("a", "p"), Grant("a", "q", granted=False)],
    )

    assert _ids(resolver.direct("a")) == {"p"}


def test_root_and_unknown_roles_inherit_nothing() -> None:
    resolver = PermissionInheritanceResolver(
        {"a": None, "b": "gone"},
        [Grant("a", "p", can_delegate=True)],
    )

    assert resolver.inherited("a") == []
    assert resolver.inherited("b") == []
    assert resolver.effective("nobody") == []


def test_parent_cycle_raises() -> None:
    resolver = PermissionInheritanceResolver(
        {"a": "b", "b": "a"},
        [Grant("a", "p", can_delegate=True)],
    )

    with pytest.raises(HierarchyCycleError):
        resolver.effective("a")


def test_merges_several_ancestors() -> None:
    resolver = PermissionInheritanceResolver(
        {"ceo": None, "cto": "ceo", "lead": "cto"},
        [
            Grant("ceo", "view-reports", can_delegate=True),
            Grant("cto", "deploy", can_delegate=True),
            Grant("cto", "view-reports", can_delegate=True),
            Grant("cto", "budget", can_delegate=False),
        ],
    )

    inherited = {grant.permission_id: grant.inherited_from for grant in resolver.inherited("lead")}

    assert inherited == {"view-reports": "cto", "deploy": "cto"}
    assert _ids(resolver.effective("cto")) == {"view-reports", "deploy", "budget"}
