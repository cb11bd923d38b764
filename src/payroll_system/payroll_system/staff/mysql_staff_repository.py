from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import StaffDirectory


class MySQLStaffDirectory(StaffDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, staff_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT staff_id FROM staff WHERE staff_id=%s", (int(staff_id),))
            return fetchone(cur) is not None
