"""Base repository class."""

from typing import Any, List, Optional, Sequence

import duckdb
from ...utils.logger import get_app_logger


class BaseRepository:
    """Base class for all repositories."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        """
        Initialize repository with database connection.

        Args:
            conn: DuckDB connection instance
        """
        self.conn = conn
        self.logger = get_app_logger()

    def _fetchone(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[tuple]:
        return self.conn.execute(sql, list(params or [])).fetchone()

    def _fetchall(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
        return self.conn.execute(sql, list(params or [])).fetchall()
