from __future__ import annotations

from typing import Optional

from ..common.money import to_money
from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from ..payroll.model import PayrollHeader
from ..staff.model import StaffProfile
from .model import LegacySalary, PayslipSource
from .repository import PayslipRepository


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_source(self, payroll_id: int) -> Optional[PayslipSource]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    p.payroll_id,
                    p.staff_id,
                    st.name AS staff_name,
                    st.date_of_joining,
                    st.position_id,
                    pos.title AS position_title,
                    dept.name AS department_name,
                    p.period_start,
                    p.period_end,
                    p.total_salary,
                    p.status,
                    p.created_at,
                    s.salary_id,
                    s.basic_salary,
                    s.allowance,
                    s.deduction
                FROM payroll p
                JOIN staff st ON p.staff_id = st.staff_id
                LEFT JOIN position pos ON st.position_id = pos.position_id
                LEFT JOIN department dept ON pos.department_id = dept.department_id
                LEFT JOIN salary s ON p.staff_id = s.staff_id
                WHERE p.payroll_id = %s
                """,
                (int(payroll_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

        header = PayrollHeader(
            payroll_id=int(r["payroll_id"]),
            staff_id=int(r["staff_id"]),
            period_start=r["period_start"],
            period_end=r["period_end"],
            total_salary=to_money(r.get("total_salary")),
            status=PayrollStatus(r["status"]),
            created_at=r.get("created_at"),
            staff_name=r.get("staff_name"),
            position_title=r.get("position_title"),
        )
        profile = StaffProfile(
            staff_id=int(r["staff_id"]),
            name=r.get("staff_name") or "",
            position_id=r.get("position_id"),
            position_title=r.get("position_title"),
            department_name=r.get("department_name"),
            date_of_joining=r.get("date_of_joining"),
        )
        salary = None
        if r.get("salary_id") is not None:
            salary = LegacySalary(
                basic_salary=to_money(r.get("basic_salary")),
                allowance=to_money(r.get("allowance")),
                deduction=to_money(r.get("deduction")),
            )
        return PayslipSource(header=header, profile=profile, salary=salary)
