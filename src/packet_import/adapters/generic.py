"""
Generic adapter for packet_import.

This module provides an adapter that works with any database driver that
follows the Python DB-API 2.0 specification and speaks MySQL-compatible SQL
(MySQLdb, mysql-connector-python, a MariaDB driver, ...).
"""
import logging
from typing import Any, Callable, Optional, Tuple

from packet_import.adapters.base import SQLAdapter
from packet_import.errors import DuplicateKeyError, InconsistentFeedbackError, StatementError

logger = logging.getLogger(__name__)

ER_DUP_ENTRY = 1062


class GenericAdapter(SQLAdapter):
    """
    Generic adapter for connecting packet_import to any DB-API connection.

    The packet limit is not queried from the server; pass the value the
    server is configured with (0 for no limit).

    Example:
        >>> import MySQLdb
        >>> from packet_import import BulkImporter, ImportRequest
        >>> from packet_import.adapters.generic import GenericAdapter
        >>>
        >>> conn = MySQLdb.connect(host="localhost", db="app")
        >>> adapter = GenericAdapter(connection=conn, max_packet_size=4_194_304)
        >>> importer = BulkImporter(adapter)
        >>> result = importer.import_rows(ImportRequest(
        ...     "INSERT INTO users (id,name) VALUES ",
        ...     fragments=["(NULL,'Alice')", "(NULL,'Bob')"],
        ... ))
    """

    def __init__(
        self,
        connection: Any,
        create_cursor_fn: Optional[Callable] = None,
        max_packet_size: int = 4_194_304,
        feedback_query: str = "SELECT LAST_INSERT_ID(), ROW_COUNT()",
        duplicate_errnos: Tuple[int, ...] = (ER_DUP_ENTRY,),
        autocommit: Optional[bool] = None,
    ):
        """
        Initialize a generic DB-API adapter.

        Args:
            connection: A DB-API compatible connection object
            create_cursor_fn: Optional function to create a cursor (defaults to connection.cursor())
            max_packet_size: Packet limit in bytes (0 means unlimited)
            feedback_query: Query returning (first generated id, affected rows)
                for the previous statement
            duplicate_errnos: Driver error codes that indicate a unique key violation
            autocommit: Whether the session commits every statement on its own.
                When False the session is treated as already inside a
                transaction, so imports use savepoints and leave the commit
                to the caller. None asks the driver (get_autocommit()).
        """
        super().__init__()
        self.connection = connection
        self.create_cursor_fn = create_cursor_fn or (lambda conn: conn.cursor())
        self._max_packet_size = max_packet_size
        self.feedback_query = feedback_query
        self.duplicate_errnos = duplicate_errnos
        self.autocommit = autocommit
        self._cursor = None
        self._feedback: Optional[Tuple[int, int]] = None

        logger.debug(f"Initialized GenericAdapter with max_packet_size={max_packet_size}")

    def _get_cursor(self) -> Any:
        """Get a cursor, creating it if necessary."""
        if self._cursor is None:
            self._cursor = self.create_cursor_fn(self.connection)
        return self._cursor

    def _run(self, sql: str) -> Any:
        cursor = self._get_cursor()

        try:
            cursor.execute(sql)
        except Exception as e:
            errno = e.args[0] if e.args and isinstance(e.args[0], int) else None
            if errno in self.duplicate_errnos:
                raise DuplicateKeyError(f"Duplicate key: {str(e)}", sql=sql, errno=errno) from e
            logger.error(f"Error executing SQL: {str(e)}")
            raise StatementError(f"Failed to execute SQL: {str(e)}", sql=sql, errno=errno) from e

        if cursor.description:
            return cursor.fetchall()
        return None

    def execute(self, sql: str) -> Any:
        """
        Execute a SQL statement using the DB-API connection.

        Args:
            sql: The SQL statement to execute

        Returns:
            Result rows, or None for DDL/DML statements
        """
        logger.debug(f"Executing SQL ({len(sql)} chars)")
        self._feedback = None
        return self._run(sql)

    def fetch_insert_feedback(self) -> Tuple[int, int]:
        """Run the feedback query once per statement and return its first two columns."""
        if self._feedback is None:
            rows = self._run(self.feedback_query)
            if not rows:
                raise InconsistentFeedbackError(f"No row returned by {self.feedback_query!r}")
            row = rows[0]
            if isinstance(row, dict):
                row = tuple(row.values())
            self._feedback = (int(row[0] or 0), int(row[1] or 0))
        return self._feedback

    def fetch_last_insert_id(self) -> int:
        return self.fetch_insert_feedback()[0]

    def fetch_affected_row_count(self) -> int:
        return self.fetch_insert_feedback()[1]

    def get_max_packet_size(self) -> int:
        """
        Get the maximum statement size in bytes.

        Returns:
            Packet limit in bytes, 0 for no limit
        """
        return self._max_packet_size

    def _session_autocommit(self) -> bool:
        if self.autocommit is not None:
            return self.autocommit
        get_autocommit = getattr(self.connection, 'get_autocommit', None)
        if callable(get_autocommit):
            return bool(get_autocommit())
        return True

    def in_transaction(self) -> bool:
        """
        Return True if the session is inside a transaction.

        Drivers exposing an in_transaction flag (mysql-connector-python,
        sqlite3) are asked directly. Otherwise a session without autocommit
        is assumed to hold the caller's implicit transaction.
        """
        if self._scopes:
            return True
        flag = getattr(self.connection, 'in_transaction', None)
        if isinstance(flag, bool):
            return flag
        return not self._session_autocommit()

    def _begin(self) -> None:
        if hasattr(self.connection, 'begin'):
            self.connection.begin()
        else:
            self._run("START TRANSACTION")

    def _commit(self) -> None:
        self.connection.commit()

    def _rollback(self) -> None:
        self.connection.rollback()

    def close(self) -> None:
        """Close the cursor."""
        if self._cursor:
            self._cursor.close()
            self._cursor = None

        logger.debug("Closed DB cursor")
