from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class StaffProfile:
    """Read-only view of a staff member owned by the HR directory.

    Note: This core never writes staff/position/department rows.
    """

    staff_id: int
    name: str
    position_id: Optional[int] = None
    position_title: Optional[str] = None
    department_name: Optional[str] = None
    date_of_joining: Optional[date] = None
