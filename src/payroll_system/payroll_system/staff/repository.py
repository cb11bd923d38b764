from __future__ import annotations

from typing import Protocol


class StaffDirectory(Protocol):
    """Read-only staff directory interface (staff/position/department).

    Services depend on this interface, not on a concrete database.
    """

    def exists(self, staff_id: int) -> bool:
        raise NotImplementedError
