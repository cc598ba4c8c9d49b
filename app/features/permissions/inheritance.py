"""
Resolve the permissions a role sees through the role hierarchy.

Pure computation over data already loaded from the database: a role id to
parent id map and the stored direct grants. Nothing here touches the session,
and inherited entries are never written back.

A role inherits from its parent whatever the parent may pass on: the parent's
own grants marked ``can_delegate``, plus anything the parent inherited that is
still delegable. Inherited entries are not delegable themselves, so a
permission reaches a grandchild only if the middle role re-grants it with
``can_delegate`` set. When a role holds a direct grant for a permission it
also inherits, the direct grant wins.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from app.core.errors import HierarchyCycleError


@dataclass(frozen=True)
class Grant:
    """One entry of a role's permission set."""
    role_id: str
    permission_id: str
    granted: bool = True
    can_delegate: bool = False
    inherited_from: str | None = None

    @classmethod
    def from_record(cls, record) -> "Grant":
        """Build from a ``RolePermission`` row."""
        return cls(
            role_id=record.role_id,
            permission_id=record.permission_id,
            granted=record.granted,
            can_delegate=record.can_delegate,
        )


class PermissionInheritanceResolver:
    """
    Direct, inherited and effective permission sets for the roles of one
    organization.

    Args:
        parents: role id -> parent role id (None for roots). A parent id that
            is not itself a key is treated as absent.
        grants: stored direct grants; rows with ``granted`` false are ignored.

    Results are memoized for the lifetime of the instance, so build a new
    resolver after the grants or the hierarchy change.
    """

    def __init__(self, parents: Mapping[str, str | None], grants: Iterable[Grant]):
        self._parents = dict(parents)
        self._direct: dict[str, dict[str, Grant]] = {}
        for grant in grants:
            if grant.granted and grant.inherited_from is None:
                self._direct.setdefault(grant.role_id, {})[grant.permission_id] = grant
        self._inheritable: dict[str, list[Grant]] = {}

    def direct(self, role_id: str) -> list[Grant]:
        return list(self._direct.get(role_id, {}).values())

    def inherited(self, role_id: str) -> list[Grant]:
        """Entries passed down from the parent chain, labelled with their origin."""
        return self._inherited(role_id, (role_id,))

    def inheritable(self, role_id: str) -> list[Grant]:
        """Entries this role passes on to its children."""
        return self._collect_inheritable(role_id, ())

    def effective(self, role_id: str) -> list[Grant]:
        """Direct entries plus inherited ones, direct taking precedence."""
        merged = {grant.permission_id: grant for grant in self.inherited(role_id)}
        merged.update(self._direct.get(role_id, {}))
        return list(merged.values())

    def _parent_of(self, role_id: str) -> str | None:
        parent_id = self._parents.get(role_id)
        return parent_id if parent_id in self._parents else None

    def _inherited(self, role_id: str, trail: tuple[str, ...]) -> list[Grant]:
        parent_id = self._parent_of(role_id)
        if parent_id is None:
            return []
        return [
            replace(
                grant,
                role_id=role_id,
                can_delegate=False,
                inherited_from=grant.inherited_from or grant.role_id,
            )
            for grant in self._collect_inheritable(parent_id, trail)
        ]

    def _collect_inheritable(self, role_id: str, trail: tuple[str, ...]) -> list[Grant]:
        if role_id in self._inheritable:
            return self._inheritable[role_id]
        if role_id in trail:
            raise HierarchyCycleError(f"Role parent cycle through {role_id}")

        merged = {grant.permission_id: grant for grant in self._inherited(role_id, trail + (role_id,))}
        merged.update(self._direct.get(role_id, {}))
        result = [grant for grant in merged.values() if grant.can_delegate]
        self._inheritable[role_id] = result
        return result
