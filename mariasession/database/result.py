"""Result handles: the rows of one query, fetched incrementally."""

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, TYPE_CHECKING

from mysql.connector import Error as MySQLError
from mysql.connector.constants import FieldType

from .exceptions import QueryError
from .models import QueryResult

if TYPE_CHECKING:
    from .connection import Connection

logger = logging.getLogger(__name__)


class ResultHandle:
    """A query in flight on a connection.

    The handle takes the connection's single result slot when created, which
    closes any result that held it. The connection may revoke the handle at
    any time; a revoked handle reports ``is_live`` as False and refuses to
    fetch. The handle never closes the connection's transport.
    """

    def __init__(self, connection: "Connection", sql: str):
        self._connection = connection
        self.statement = sql
        self._cursor = None
        self._live = False
        self._completed = False
        self._rows_fetched = 0
        self._rows_affected = 0

        connection.check_connection()
        connection.set_current_result(self)
        self._live = True

        try:
            self._cursor = connection.open_cursor(sql)
        except QueryError:
            connection.set_current_result(None)
            raise

        if self._cursor.description is None:
            self._completed = True
            self._rows_affected = max(self._cursor.rowcount, 0)

    def __enter__(self) -> "ResultHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "live" if self._live else "closed"
        return f"<ResultHandle {state} {self.statement!r}>"

    @property
    def is_live(self) -> bool:
        return self._live

    @property
    def has_completed(self) -> bool:
        return self._completed

    @property
    def rows_fetched(self) -> int:
        return self._rows_fetched

    @property
    def rows_affected(self) -> int:
        """Rows changed by a statement; 0 for queries returning rows."""
        return self._rows_affected

    def is_current(self) -> bool:
        return self._connection.is_current_result(self)

    def _check_live(self) -> None:
        if not self._live:
            raise QueryError("inactive result set")

    def column_info(self) -> List[Dict[str, Any]]:
        """Name and MySQL type name of each result column."""
        self._check_live()
        description = self._cursor.description or []
        return [
            {"name": column[0], "type": FieldType.get_info(column[1])}
            for column in description
        ]

    def fetch(self, n: int = -1) -> QueryResult:
        """Fetch up to ``n`` rows, or every remaining row when ``n`` is negative."""
        self._check_live()
        start_time = time.time()

        if self._cursor.description is None or self._completed or n == 0:
            rows = []
        else:
            try:
                rows = self._cursor.fetchall() if n < 0 else self._cursor.fetchmany(n)
            except MySQLError as e:
                logger.error(f"Fetch failed: {e}")
                raise QueryError(f"Error fetching rows: {e.msg}", driver_message=e.msg,
                                 errno=e.errno, sqlstate=e.sqlstate) from e

        if n < 0 or len(rows) < n:
            self._completed = True
        self._rows_fetched += len(rows)

        columns = [column[0] for column in self._cursor.description or []]
        return QueryResult(
            columns=columns,
            rows=[list(row) for row in rows],
            row_count=len(rows),
            execution_time=time.time() - start_time,
            query=self.statement,
            timestamp=datetime.now(),
            completed=self._completed,
        )

    def close(self) -> None:
        """Give the result slot back to the connection."""
        if not self._live:
            return
        if self._connection.is_current_result(self):
            self._connection.set_current_result(None)
        else:
            self._release()

    def _release(self) -> None:
        """Close the cursor. Called by the connection when the slot is taken back."""
        self._live = False
        cursor, self._cursor = self._cursor, None
        if cursor is None:
            return
        try:
            cursor.close()
        except MySQLError as e:
            logger.warning(f"Error while closing result: {e}")

    def _invalidate(self) -> None:
        """Mark dead without touching the transport, which is about to close."""
        self._live = False
        self._cursor = None
