from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import (
    ConflictError,
    DomainError,
    ForeignKeyError,
    InternalError,
    ValidationError,
)
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_FOREIGN_KEY_ERRNOS = {
    errorcode.ER_NO_REFERENCED_ROW,
    errorcode.ER_NO_REFERENCED_ROW_2,
    errorcode.ER_ROW_IS_REFERENCED,
    errorcode.ER_ROW_IS_REFERENCED_2,
}

_BAD_VALUE_ERRNOS = {
    errorcode.ER_BAD_NULL_ERROR,
    errorcode.ER_DATA_TOO_LONG,
    errorcode.ER_TRUNCATED_WRONG_VALUE,
    errorcode.ER_WARN_DATA_OUT_OF_RANGE,
}


def translate_db_error(exc: mysql.connector.Error) -> DomainError:
    """Map a vendor error onto the domain error taxonomy by errno."""

    errno = getattr(exc, "errno", None)
    detail = str(exc)

    if errno == errorcode.ER_DUP_ENTRY:
        return ConflictError("Record already exists", reason="DuplicateRecord", detail=detail)
    if errno in _FOREIGN_KEY_ERRNOS:
        return ForeignKeyError("Referenced record does not exist", reason="ForeignKeyViolation", detail=detail)
    if errno in _BAD_VALUE_ERRNOS:
        return ValidationError("Invalid value for a stored field", reason="InvalidValue", detail=detail)
    return InternalError("Unexpected database error", reason="DatabaseError", detail=detail)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One unit of work: commit on success, roll back fully on any failure.

    mysql-connector errors are re-raised as domain errors after the rollback.
    """

    with conn_factory.connection() as conn:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        except mysql.connector.Error as exc:
            conn.rollback()
            translated = translate_db_error(exc)
            logger.warning("Rolled back transaction: %s (errno=%s)", translated.reason, getattr(exc, "errno", None))
            raise translated from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
