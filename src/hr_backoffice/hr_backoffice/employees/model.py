from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Gender, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Owned by the provisioning side; this core only reads it.
    """

    employee_id: str
    organization_id: str
    role: Role
    name: str
    employee_code: str = ""
    gender: Optional[Gender] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    is_blocked: bool = False
