from __future__ import annotations

from typing import Collection, Optional, Sequence

from ..core.enums import Gender, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository, RoleRepository

_EMPLOYEE_COLUMNS = """
    employee_id, organization_id, role, name, employee_code,
    gender, department, designation, is_blocked
"""


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=str(row["employee_id"]),
        organization_id=str(row["organization_id"]),
        role=Role(row["role"]),
        name=row["name"],
        employee_code=row.get("employee_code") or "",
        gender=Gender(row["gender"]) if row.get("gender") else None,
        department=row.get("department"),
        designation=row.get("designation"),
        is_blocked=bool(row.get("is_blocked", False)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id=%s",
                (employee_id,),
            )
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def lock(self, employee_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE",
                (employee_id,),
            )
            return fetchone(cur) is not None


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_user_ids_with_roles(self, *, organization_id: str, roles: Collection[Role]) -> Sequence[str]:
        role_values = [Role(r).value for r in roles]
        if not role_values:
            return []
        placeholders = ",".join(["%s"] * len(role_values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT user_id
                FROM user_roles
                WHERE organization_id=%s AND role IN ({placeholders})
                ORDER BY user_id
                """,
                tuple([organization_id] + role_values),
            )
            return [str(r["user_id"]) for r in fetchall(cur)]
