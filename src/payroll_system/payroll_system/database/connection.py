from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import mysql.connector
from mysql.connector import pooling

from ..core.constants import DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT_SECONDS
from ..core.exceptions import InternalError

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Bounded connection pool handle.

    Built once by the container and passed to every repository. At most
    `pool_size` connections are checked out at a time; a caller waits up to
    `acquire_timeout` seconds for a free one before failing with InternalError.
    """

    def __init__(
        self,
        config: DBConfig,
        *,
        pool_size: int = DEFAULT_POOL_SIZE,
        acquire_timeout: float = DEFAULT_POOL_TIMEOUT_SECONDS,
        pool_name: str = "payroll_system",
    ):
        self._config = config
        self._pool_size = int(pool_size)
        self._acquire_timeout = float(acquire_timeout)
        self._pool_name = pool_name
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(self._pool_size)

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                logger.info(
                    "Creating MySQL pool %s (size=%d) for %s@%s:%s/%s",
                    self._pool_name,
                    self._pool_size,
                    self._config.user,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                )
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=self._pool_name,
                    pool_size=self._pool_size,
                    pool_reset_session=True,
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    autocommit=False,
                )
            return self._pool

    @contextmanager
    def connection(self) -> Iterator[pooling.PooledMySQLConnection]:
        """Check a connection out of the pool for the duration of the block."""
        if not self._slots.acquire(timeout=self._acquire_timeout):
            logger.error("No database connection available after %.1fs", self._acquire_timeout)
            raise InternalError("Database is busy, please try again later", reason="PoolTimeout")

        try:
            try:
                conn = self._get_pool().get_connection()
            except mysql.connector.Error as exc:
                logger.exception("Failed to acquire a database connection")
                raise InternalError("Database connection failed", reason="ConnectionFailed", detail=str(exc)) from exc

            try:
                yield conn
            finally:
                conn.close()
        finally:
            self._slots.release()
