from __future__ import annotations

import logging
from typing import Collection, FrozenSet

from ..core.enums import Role
from ..core.exceptions import NoApproversAvailable
from ..employees.repository import RoleRepository

logger = logging.getLogger(__name__)


class ApproverResolver:
    """Resolve who may approve requests inside an organization.

    The result is a snapshot: callers store it on the request and never ask
    again for that request, so later role changes do not move existing work.
    """

    def __init__(self, roles: RoleRepository, *, approver_roles: Collection[Role] = (Role.HR, Role.HOD)):
        self._roles = roles
        self._approver_roles = tuple(Role(r) for r in approver_roles)

    @property
    def approver_roles(self) -> tuple[Role, ...]:
        return self._approver_roles

    def resolve(self, organization_id: str) -> FrozenSet[str]:
        ids = self._roles.list_user_ids_with_roles(organization_id=str(organization_id), roles=self._approver_roles)
        return frozenset(str(i) for i in ids if i)

    def require(self, organization_id: str) -> tuple[str, ...]:
        """Snapshot as a sorted tuple; an empty set blocks submission."""
        approvers = self.resolve(organization_id)
        if not approvers:
            logger.warning("no approvers with roles %s in organization %s", [r.value for r in self._approver_roles], organization_id)
            raise NoApproversAvailable("No approvers found (HR/HOD)")
        return tuple(sorted(approvers))
