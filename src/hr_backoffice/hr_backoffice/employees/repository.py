from __future__ import annotations

from typing import Collection, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def lock(self, employee_id: str) -> bool:
        """Take a row lock on the employee for the rest of the current transaction.

        Used as the anchor that serializes per-employee check-then-write sequences.
        """

        raise NotImplementedError


class RoleRepository(Protocol):
    """Role lookup: who currently holds a role inside an organization."""

    def list_user_ids_with_roles(self, *, organization_id: str, roles: Collection[Role]) -> Sequence[str]:
        raise NotImplementedError
