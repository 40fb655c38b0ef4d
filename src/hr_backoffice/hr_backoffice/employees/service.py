from __future__ import annotations

from ..core.enums import GENDER_RESTRICTED_LEAVE_TYPES, LeaveType
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Employee
from .repository import EmployeeRepository


class EmployeeService:
    """Use case: look up the employee acting on a request."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(str(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_active(self, employee_id: str) -> Employee:
        employee = self.get(employee_id)
        if employee.is_blocked:
            raise AuthorizationError("Employee account is blocked")
        return employee

    @staticmethod
    def allowed_leave_types(employee: Employee) -> list[LeaveType]:
        out = []
        for leave_type in LeaveType:
            genders = GENDER_RESTRICTED_LEAVE_TYPES.get(leave_type)
            if genders is None or (employee.gender is not None and employee.gender in genders):
                out.append(leave_type)
        return out
