from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.money import to_money
from ..core.enums import ComponentType, PayrollStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PayrollDetail, PayrollHeader
from .repository import HeaderMergeFn, PayrollRepository

_HEADER_SELECT = """
    SELECT
        p.payroll_id,
        p.staff_id,
        st.name AS staff_name,
        pos.title AS position_title,
        p.period_start,
        p.period_end,
        p.total_salary,
        p.status,
        p.created_at
    FROM payroll p
    JOIN staff st ON p.staff_id = st.staff_id
    LEFT JOIN position pos ON st.position_id = pos.position_id
"""


def _row_to_header(r: dict) -> PayrollHeader:
    count = r.get("component_count")
    return PayrollHeader(
        payroll_id=int(r["payroll_id"]),
        staff_id=int(r["staff_id"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        total_salary=to_money(r.get("total_salary")),
        status=PayrollStatus(r["status"]),
        created_at=r.get("created_at"),
        staff_name=r.get("staff_name"),
        position_title=r.get("position_title"),
        component_count=None if count is None else int(count),
    )


def _row_to_detail(r: dict) -> PayrollDetail:
    return PayrollDetail(
        detail_id=int(r["detail_id"]),
        payroll_id=int(r["payroll_id"]),
        component_name=r["component_name"],
        amount=to_money(r["amount"]),
        component_type=ComponentType(r["component_type"]),
    )


def _lock_header(cur, payroll_id: int) -> PayrollHeader:
    cur.execute(
        """
        SELECT payroll_id, staff_id, period_start, period_end, total_salary, status, created_at
        FROM payroll
        WHERE payroll_id=%s
        FOR UPDATE
        """,
        (int(payroll_id),),
    )
    r = fetchone(cur)
    if not r:
        raise NotFoundError("Payroll record not found")
    return _row_to_header(r)


def _insert_details(cur, payroll_id: int, details: Sequence[PayrollDetail]) -> None:
    # One statement per row, in insertion order.
    for d in details:
        cur.execute(
            """
            INSERT INTO payroll_detail (payroll_id, component_name, amount, component_type)
            VALUES (%s, %s, %s, %s)
            """,
            (int(payroll_id), d.component_name, d.amount, d.component_type.value),
        )


def _replace_details(cur, payroll_id: int, details: Sequence[PayrollDetail], total_salary: Decimal) -> None:
    cur.execute("DELETE FROM payroll_detail WHERE payroll_id=%s", (int(payroll_id),))
    _insert_details(cur, payroll_id, details)
    cur.execute("UPDATE payroll SET total_salary=%s WHERE payroll_id=%s", (total_salary, int(payroll_id)))


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_header(self, payroll_id: int) -> Optional[PayrollHeader]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_HEADER_SELECT + " WHERE p.payroll_id = %s", (int(payroll_id),))
            r = fetchone(cur)
            return _row_to_header(r) if r else None

    def list_details(self, payroll_id: int) -> Sequence[PayrollDetail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT detail_id, payroll_id, component_name, amount, component_type
                FROM payroll_detail
                WHERE payroll_id = %s
                ORDER BY component_type DESC, component_name
                """,
                (int(payroll_id),),
            )
            return [_row_to_detail(r) for r in fetchall(cur)]

    def list_headers(
        self,
        *,
        staff_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[PayrollHeader]:
        clauses = ["1=1"]
        params: list[Any] = []
        if staff_id is not None:
            clauses.append("p.staff_id = %s")
            params.append(int(staff_id))
        if status is not None:
            clauses.append("p.status = %s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    p.payroll_id, p.staff_id, st.name AS staff_name, pos.title AS position_title,
                    p.period_start, p.period_end, p.total_salary, p.status, p.created_at,
                    COUNT(pd.detail_id) AS component_count
                FROM payroll p
                JOIN staff st ON p.staff_id = st.staff_id
                LEFT JOIN position pos ON st.position_id = pos.position_id
                LEFT JOIN payroll_detail pd ON p.payroll_id = pd.payroll_id
                WHERE {" AND ".join(clauses)}
                GROUP BY p.payroll_id, st.name, pos.title
                ORDER BY p.created_at DESC, p.payroll_id DESC
                """,
                tuple(params),
            )
            return [_row_to_header(r) for r in fetchall(cur)]

    def list_for_staff(
        self,
        staff_id: int,
        *,
        statuses: Optional[Sequence[PayrollStatus]] = None,
    ) -> Sequence[PayrollHeader]:
        sql = _HEADER_SELECT + " WHERE p.staff_id = %s"
        params: list[Any] = [int(staff_id)]
        if statuses:
            sql += f" AND p.status IN ({', '.join(['%s'] * len(statuses))})"
            params.extend(s.value for s in statuses)
        sql += " ORDER BY p.period_start DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_header(r) for r in fetchall(cur)]

    def create_with_details(
        self,
        *,
        staff_id: int,
        period_start: date,
        period_end: date,
        status: PayrollStatus,
        total_salary: Decimal,
        details: Sequence[PayrollDetail],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll (staff_id, period_start, period_end, total_salary, status)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (int(staff_id), period_start, period_end, total_salary, status.value),
            )
            payroll_id = int(cur.lastrowid)
            _insert_details(cur, payroll_id, details)
            return payroll_id

    def update_with_details(
        self,
        payroll_id: int,
        merge: HeaderMergeFn,
        details: Optional[Sequence[PayrollDetail]] = None,
        total_salary: Optional[Decimal] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            header = merge(_lock_header(cur, payroll_id))
            cur.execute(
                """
                UPDATE payroll
                SET staff_id = %s, period_start = %s, period_end = %s, status = %s
                WHERE payroll_id = %s
                """,
                (header.staff_id, header.period_start, header.period_end, header.status.value, int(payroll_id)),
            )
            if details is not None:
                _replace_details(cur, payroll_id, details, total_salary)

    def replace_details(self, payroll_id: int, details: Sequence[PayrollDetail], total_salary: Decimal) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            _lock_header(cur, payroll_id)
            _replace_details(cur, payroll_id, details, total_salary)

    def update_status(self, payroll_id: int, status: PayrollStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT payroll_id FROM payroll WHERE payroll_id=%s FOR UPDATE", (int(payroll_id),))
            if not fetchone(cur):
                return False
            cur.execute("UPDATE payroll SET status = %s WHERE payroll_id = %s", (status.value, int(payroll_id)))
            return True

    def delete_with_details(self, payroll_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_detail WHERE payroll_id = %s", (int(payroll_id),))
            cur.execute("DELETE FROM payroll WHERE payroll_id = %s", (int(payroll_id),))
            if cur.rowcount == 0:
                raise NotFoundError("Payroll record not found")
