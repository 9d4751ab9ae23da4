"""
MySQL adapter for packet_import.

This module provides an adapter built on PyMySQL. It reads the packet limit
from the server's max_allowed_packet variable, reads insert feedback with
LAST_INSERT_ID() and ROW_COUNT(), and reports unique key violations as
DuplicateKeyError.
"""
from typing import Any, Dict, Optional, Sequence, Tuple
import logging

import pymysql
from pymysql.constants import ER, SERVER_STATUS

from packet_import.adapters.base import SQLAdapter
from packet_import.errors import DuplicateKeyError, InconsistentFeedbackError, StatementError

logger = logging.getLogger(__name__)

FEEDBACK_SQL = "SELECT LAST_INSERT_ID(), ROW_COUNT()"
MAX_PACKET_SQL = "SHOW VARIABLES LIKE 'max_allowed_packet'"


def _first_row_values(row: Any) -> Tuple:
    # DictCursor rows are dicts, the default cursor returns tuples.
    if isinstance(row, dict):
        return tuple(row.values())
    return tuple(row)


class MySQLAdapter(SQLAdapter):
    """
    MySQL adapter for packet_import.

    Attributes:
        connection: PyMySQL connection
        cursor: Cursor used for every statement
        max_packet_size: Packet limit override; when None it is read from the
            server once and cached for the lifetime of the adapter
    """

    def __init__(
        self,
        connection_params: Optional[Dict[str, Any]] = None,
        connection: Optional[Any] = None,
        max_packet_size: Optional[int] = None,
    ):
        """
        Initialize the MySQL adapter.

        Args:
            connection_params: Keyword arguments for pymysql.connect()
            connection: Existing PyMySQL connection to use (optional)
            max_packet_size: Packet limit in bytes; skips the server lookup

        Raises:
            ValueError: If both connection and connection_params are None
            RuntimeError: If connection to MySQL fails
        """
        super().__init__()

        if connection is None and connection_params is None:
            raise ValueError("Either connection or connection_params must be provided")

        if connection is None:
            try:
                self.connection = pymysql.connect(**connection_params)
            except pymysql.MySQLError as e:
                raise RuntimeError(f"Failed to connect to MySQL: {str(e)}") from e
        else:
            self.connection = connection

        self.max_packet_size = max_packet_size
        self.cursor = self.connection.cursor()
        self._feedback: Optional[Tuple[int, int]] = None

    def _run(self, sql: str) -> Any:
        try:
            self.cursor.execute(sql)
        except pymysql.err.IntegrityError as e:
            errno = e.args[0] if e.args else None
            if errno == ER.DUP_ENTRY:
                logger.info(f"Duplicate key: {str(e)}")
                raise DuplicateKeyError(f"Duplicate key: {str(e)}", sql=sql, errno=errno) from e
            logger.error(f"MySQL error: {str(e)}")
            raise StatementError(f"Failed to execute MySQL statement: {str(e)}",
                                 sql=sql, errno=errno) from e
        except pymysql.MySQLError as e:
            errno = e.args[0] if e.args and isinstance(e.args[0], int) else None
            logger.error(f"MySQL error: {str(e)}")
            raise StatementError(f"Failed to execute MySQL statement: {str(e)}",
                                 sql=sql, errno=errno) from e

        if self.cursor.description is not None:
            return self.cursor.fetchall()
        return None

    def execute(self, sql: str) -> Any:
        """
        Execute a SQL statement.

        Args:
            sql: SQL statement to execute

        Returns:
            Result rows, or None for statements without a result set

        Raises:
            DuplicateKeyError: If the statement violates a unique key
            StatementError: If there's any other error executing the statement
        """
        self._feedback = None
        return self._run(sql)

    def fetch_insert_feedback(self) -> Tuple[int, int]:
        """
        Return (LAST_INSERT_ID(), ROW_COUNT()) for the statement just executed.

        Both values are read in one round trip, since ROW_COUNT() refers to
        the previous statement on the session.
        """
        if self._feedback is None:
            rows = self._run(FEEDBACK_SQL)
            if not rows:
                raise InconsistentFeedbackError("No row returned for LAST_INSERT_ID(), ROW_COUNT()")
            last_insert_id, row_count = _first_row_values(rows[0])[:2]
            self._feedback = (int(last_insert_id or 0), int(row_count or 0))
        return self._feedback

    def fetch_last_insert_id(self) -> int:
        return self.fetch_insert_feedback()[0]

    def fetch_affected_row_count(self) -> int:
        return self.fetch_insert_feedback()[1]

    def get_max_packet_size(self) -> int:
        """
        Get the maximum statement size in bytes.

        Returns:
            The server's max_allowed_packet, cached after the first call
        """
        if self.max_packet_size is None:
            rows = self._run(MAX_PACKET_SQL)
            if not rows:
                logger.warning("max_allowed_packet not reported, treating packet size as unlimited")
                self.max_packet_size = 0
            else:
                self.max_packet_size = int(_first_row_values(rows[0])[1])
            logger.debug(f"max_allowed_packet is {self.max_packet_size} bytes")
        return self.max_packet_size

    def in_transaction(self) -> bool:
        """Return True if the session is inside a transaction, however it was opened."""
        if self._scopes:
            return True
        status = getattr(self.connection, "server_status", 0) or 0
        return bool(status & SERVER_STATUS.SERVER_STATUS_IN_TRANS)

    def _begin(self) -> None:
        self.connection.begin()

    def _commit(self) -> None:
        self.connection.commit()

    def _rollback(self) -> None:
        self.connection.rollback()

    def literal_row(self, values: Sequence[Any]) -> str:
        """
        Quote one row of values as a "(v1,v2,...)" fragment.

        Args:
            values: Python values in column order

        Returns:
            The row tuple as SQL text, escaped for this connection
        """
        return self.connection.escape(tuple(values))

    def close(self) -> None:
        """
        Close the connection.
        """
        if getattr(self, "cursor", None):
            self.cursor.close()

        if getattr(self, "connection", None):
            self.connection.close()
